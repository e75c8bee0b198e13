"""Tests for document page discovery, validation and paper defaults."""
import unittest

from declarative_pdf.errors import TemplateParsingError
from declarative_pdf.model.paper_model import DEFAULT_HEIGHT, DEFAULT_WIDTH, PaperDefaults, is_ppi
from declarative_pdf.parser.template_parser import TemplateParser, normalize_setting, validate_template_setting
from declarative_pdf.utils.units import mm_to_px


def record(**overrides):
    base = {"index": 0, "width": 595, "height": 842, "bodyMarginTop": 0, "bodyMarginBottom": 0, "hasSections": False}
    base.update(overrides)
    return base


class ValidateTemplateSettingTest(unittest.TestCase):
    """Each invalid field yields a message naming it."""

    def assertInvalid(self, setting, fragment: str) -> None:
        with self.assertRaises(TemplateParsingError) as ctx:
            validate_template_setting(setting)
        message = str(ctx.exception)
        self.assertTrue(message.startswith("Template parsing error: "), message)
        self.assertIn(fragment, message)

    def test_valid_record_passes(self) -> None:
        validate_template_setting(record())
        validate_template_setting(record(index=10, width=42, height=42000))

    def test_malformed_record(self) -> None:
        self.assertInvalid({"index": 0}, "malformed")
        self.assertInvalid("page", "malformed")

    def test_index_bounds(self) -> None:
        self.assertInvalid(record(index="0"), "setting.index is not a number")
        self.assertInvalid(record(index=-1), "setting.index is negative")
        self.assertInvalid(record(index=11), "setting.index is too large")

    def test_size_bounds(self) -> None:
        self.assertInvalid(record(width=float("nan")), "setting.width is not a number")
        self.assertInvalid(record(height=0), "setting.height is not positive")
        self.assertInvalid(record(width=41), "setting.width is too small")
        self.assertInvalid(record(height=42001), "setting.height is too large")


class NormalizeSettingTest(unittest.TestCase):
    def test_fractional_values_round_up(self) -> None:
        setting = normalize_setting(record(width=595.2, height=841.01, bodyMarginTop=10.5, hasSections=True))
        self.assertEqual(setting.width, 596)
        self.assertEqual(setting.height, 842)
        self.assertEqual(setting.body_margin_top, 11)
        self.assertTrue(setting.has_sections)

    def test_unusable_sizes_fall_back_to_defaults(self) -> None:
        setting = normalize_setting({"index": 1, "width": "wide", "height": float("inf")})
        self.assertEqual(setting.width, DEFAULT_WIDTH)
        self.assertEqual(setting.height, DEFAULT_HEIGHT)
        self.assertEqual(setting.body_margin_bottom, 0)

    def test_negative_margins_clamp_to_zero(self) -> None:
        self.assertEqual(normalize_setting(record(bodyMarginBottom=-20)).body_margin_bottom, 0)


class TemplateParserTest(unittest.TestCase):
    def test_records_become_document_pages_in_order(self) -> None:
        pages = TemplateParser().parse([record(index=0), record(index=1, width=400, hasSections=True)])

        self.assertEqual([page.index for page in pages], [0, 1])
        self.assertEqual(pages[1].width, 400)
        self.assertTrue(pages[1].has_sections)
        self.assertIsNone(pages[0].layout)
        self.assertEqual(pages[0].viewport, {"width": 595, "height": 842})

    def test_no_records_fail(self) -> None:
        with self.assertRaises(TemplateParsingError) as ctx:
            TemplateParser().parse([])
        self.assertIn("No document pages found", str(ctx.exception))

    def test_invalid_record_rejected_before_normalizing(self) -> None:
        with self.assertRaises(TemplateParsingError):
            TemplateParser().parse([record(), record(index=1, width=10)])


class PaperDefaultsTest(unittest.TestCase):
    def test_default_is_a4_at_72_ppi(self) -> None:
        paper = PaperDefaults.from_options()
        self.assertEqual((paper.width, paper.height, paper.ppi), (595, 842, 72))

    def test_named_format_uses_ppi(self) -> None:
        paper = PaperDefaults.from_options(ppi=96, format="letter")
        self.assertEqual(paper.format, "letter")
        self.assertEqual(paper.width, mm_to_px(216, 96))
        self.assertEqual(paper.height, mm_to_px(279, 96))

    def test_invalid_ppi_and_format_fall_back(self) -> None:
        paper = PaperDefaults.from_options(ppi=5000, format="napkin")
        self.assertEqual(paper, PaperDefaults())
        self.assertFalse(is_ppi(42))
        self.assertTrue(is_ppi(43))

    def test_explicit_dimensions(self) -> None:
        self.assertEqual(PaperDefaults.from_options(width=300, height=500).to_payload(),
                         {"width": 300, "height": 500, "ppi": 72})
        partial = PaperDefaults.from_options(width=300)
        self.assertEqual((partial.width, partial.height), (300, DEFAULT_HEIGHT))

    def test_mm_to_px_rounds_half_up(self) -> None:
        self.assertEqual(mm_to_px(210, 72), 595)
        self.assertEqual(mm_to_px(297, 72), 842)


if __name__ == "__main__":
    unittest.main()
