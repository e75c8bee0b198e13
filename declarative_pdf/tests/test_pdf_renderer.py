"""Tests for composing output pages from bodies and section fragments."""
import unittest
from datetime import datetime, timezone
from unittest.mock import patch

from declarative_pdf.errors import LayoutError, SectionIsolationError
from declarative_pdf.model.document_model import DocumentMetadata, DocumentPage
from declarative_pdf.model.elements import BACKGROUND, DEFAULT, FIRST, FOOTER, HEADER, BodyElement
from declarative_pdf.parser.layout_calculator import LayoutCalculator
from declarative_pdf.parser.section_parser import SectionParser
from declarative_pdf.renderer.pdf_primitives import (
    add_page,
    copy_pages,
    create_pdf,
    embed_page,
    load_pdf,
    resize_pages,
    save_pdf,
    set_document_metadata,
)
from declarative_pdf.renderer.pdf_renderer import PageAssembler, build_layout_pages
from declarative_pdf.tests.fakes import FakeDocumentPage, FakeHtmlAdapter, make_pdf


def prepare_page(adapter: FakeHtmlAdapter, index: int = 0) -> DocumentPage:
    """Lay out and render the body of one fake document page without going through the generator."""
    fake = adapter.pages[index]
    page = DocumentPage(index=index, width=fake.width, height=fake.height, has_sections=fake.has_sections)
    settings = SectionParser(index).parse(adapter.section_settings(index)) if fake.has_sections else None
    page.layout = LayoutCalculator().calculate(settings, page.width, page.height)
    texts = [f"body {index}-{number}" for number in range(fake.body_pages)]
    data = make_pdf(page.width, page.layout.body.height, texts)
    page.body = BodyElement(data=data, pdf=load_pdf(data))
    return page


def words(page):
    return {word[4]: word[:4] for word in page.get_text("words")}


class BuildLayoutPagesTest(unittest.TestCase):
    def setUp(self) -> None:
        self.adapter = FakeHtmlAdapter([FakeDocumentPage(body_pages=3, footers=[{"height": 20}])])
        self.page = prepare_page(self.adapter)

    def test_numbers_include_previous_document_pages(self) -> None:
        layout_pages = build_layout_pages(self.page, offset=2, total=5)

        self.assertEqual([item.current_page_number for item in layout_pages], [3, 4, 5])
        self.assertEqual({item.total_pages_number for item in layout_pages}, {5})
        self.assertEqual([item.page_index for item in layout_pages], [0, 1, 2])
        self.assertTrue(all(item.footer is not None and item.header is None for item in layout_pages))

    def test_inconsistent_counts_raise(self) -> None:
        with self.assertRaises(LayoutError):
            build_layout_pages(self.page, offset=-1, total=3)
        with self.assertRaises(LayoutError):
            build_layout_pages(self.page, offset=2, total=4)


class PageAssemblerTest(unittest.TestCase):
    def setUp(self) -> None:
        self.target = create_pdf()

    def tearDown(self) -> None:
        self.target.close()

    def test_page_without_sections_copies_body_pages(self) -> None:
        adapter = FakeHtmlAdapter([FakeDocumentPage(body_pages=2)])
        page = prepare_page(adapter)

        emitted = PageAssembler(adapter, self.target).assemble(page, 0, 2)

        self.assertEqual(emitted, 2)
        self.assertEqual(self.target.page_count, 2)
        for index in range(2):
            self.assertEqual(self.target[index].get_text(), page.body.pdf[index].get_text())
        self.assertEqual(adapter.prints, [])
        self.assertEqual(adapter.viewports, [])

    def test_reusable_header_rendered_once_numbered_footer_per_page(self) -> None:
        fake = FakeDocumentPage(
            body_pages=4,
            headers=[{"height": 40}],
            footers=[{"height": 30, "hasCurrentPageNumber": True, "hasTotalPagesNumber": True}],
            texts={(HEADER, None): "Letterhead", (FOOTER, None): "Page {current}/{total}"},
        )
        adapter = FakeHtmlAdapter([fake])
        page = prepare_page(adapter)

        emitted = PageAssembler(adapter, self.target).assemble(page, offset=2, total=6)

        self.assertEqual(emitted, 4)
        self.assertEqual(self.target.page_count, 4)
        self.assertEqual(adapter.viewports, [(200, 300)])

        headers = adapter.prints_for(HEADER)
        self.assertEqual(len(headers), 1)
        self.assertIsNone(headers[0].current_page_number)
        self.assertIsNone(headers[0].total_pages_number)

        footers = adapter.prints_for(FOOTER)
        self.assertEqual([request.current_page_number for request in footers], [3, 4, 5, 6])
        self.assertEqual({request.total_pages_number for request in footers}, {6})

        for index, current in enumerate(range(3, 7)):
            text = self.target[index].get_text()
            self.assertIn("Letterhead", text)
            self.assertIn(f"Page {current}/6", text)
            self.assertIn(f"body 0-{index}", text)

    def test_sections_drawn_in_their_regions(self) -> None:
        fake = FakeDocumentPage(
            headers=[{"height": 40}],
            footers=[{"height": 30}],
            texts={(HEADER, None): "Top", (FOOTER, None): "Bottom"},
        )
        adapter = FakeHtmlAdapter([fake])
        page = prepare_page(adapter)

        PageAssembler(adapter, self.target).assemble(page, 0, 1)

        placed = words(self.target[0])
        self.assertLessEqual(placed["Top"][3], 41)
        self.assertGreaterEqual(placed["Bottom"][1], 300 - 31)
        self.assertGreaterEqual(placed["body"][1], 300 - 31 - page.layout.body.height)

    def test_section_print_heights(self) -> None:
        fake = FakeDocumentPage(
            headers=[{"height": 40}],
            backgrounds=[{"height": 300}],
        )
        adapter = FakeHtmlAdapter([fake])
        page = prepare_page(adapter)

        PageAssembler(adapter, self.target).assemble(page, 0, 1)

        by_type = {request.section_type: (height, transparent) for request, _, height, transparent in adapter.prints}
        self.assertEqual(by_type[HEADER], (40, True))
        self.assertEqual(by_type[BACKGROUND], (300, False))

    def test_header_drawn_at_its_printed_scale(self) -> None:
        fake = FakeDocumentPage(headers=[{"height": 20}], texts={(HEADER, None): "Letterhead"})
        adapter = FakeHtmlAdapter([fake])
        page = prepare_page(adapter)

        PageAssembler(adapter, self.target).assemble(page, 0, 1)

        [(_, width, height, _)] = adapter.prints
        self.assertEqual((width, height), (200, page.layout.header.height))

        fragment = load_pdf(make_pdf(200, 20, ["Letterhead"]))
        x0, y0, x1, y1 = words(fragment[0])["Letterhead"]
        drawn = words(self.target[0])["Letterhead"]
        self.assertAlmostEqual(drawn[3] - drawn[1], y1 - y0, places=2)
        self.assertAlmostEqual(drawn[2] - drawn[0], x1 - x0, places=2)
        fragment.close()

    def test_variants_resolved_per_output_page(self) -> None:
        fake = FakeDocumentPage(
            body_pages=3,
            headers=[
                {"height": 40, "physicalPageIndex": 0, "physicalPageType": FIRST},
                {"height": 40, "physicalPageIndex": 1, "physicalPageType": DEFAULT},
            ],
            texts={(HEADER, 0): "Cover", (HEADER, 1): "Running"},
        )
        adapter = FakeHtmlAdapter([fake])
        page = prepare_page(adapter)

        PageAssembler(adapter, self.target).assemble(page, 0, 3)

        self.assertEqual([request.physical_page_index for request in adapter.prints_for(HEADER)], [0, 1])
        self.assertIn("Cover", self.target[0].get_text())
        self.assertIn("Running", self.target[1].get_text())
        self.assertIn("Running", self.target[2].get_text())

    def test_multi_page_section_logs_warning(self) -> None:
        fake = FakeDocumentPage(headers=[{"height": 40}], section_page_counts={(HEADER, None): 2})
        adapter = FakeHtmlAdapter([fake])
        page = prepare_page(adapter)

        with self.assertLogs("declarative_pdf.renderer.pdf_renderer", level="WARNING") as logs:
            emitted = PageAssembler(adapter, self.target).assemble(page, 0, 1)

        self.assertEqual(emitted, 1)
        self.assertIn("produced 2 pages", logs.output[0])

    def test_section_that_cannot_be_isolated_fails(self) -> None:
        adapter = FakeHtmlAdapter([FakeDocumentPage(footers=[{"height": 30}])])
        page = prepare_page(adapter)

        with patch.object(adapter, "prepare_section", return_value=False):
            with self.assertRaises(SectionIsolationError):
                PageAssembler(adapter, self.target).assemble(page, 0, 1)


class PdfPrimitivesTest(unittest.TestCase):
    def test_resize_stretches_pages(self) -> None:
        resized = load_pdf(resize_pages(make_pdf(150, 225, ["one", "two"]), 200, 300))

        self.assertEqual(resized.page_count, 2)
        self.assertEqual((resized[1].rect.width, resized[1].rect.height), (200, 300))
        self.assertIn("two", resized[1].get_text())
        resized.close()

    def test_resize_keeps_matching_pages(self) -> None:
        data = make_pdf(200, 300, ["same"])
        self.assertIs(resize_pages(data, 200, 300.2), data)

    def test_copy_selected_pages(self) -> None:
        source = load_pdf(make_pdf(100, 100, ["a", "b", "c"]))
        target = create_pdf()

        self.assertEqual(copy_pages(target, source, [2, 0]), 2)
        self.assertIn("c", target[0].get_text())
        self.assertIn("a", target[1].get_text())
        target.close()
        source.close()

    def test_embed_out_of_range(self) -> None:
        source = load_pdf(make_pdf(100, 100, ["a"]))
        self.assertEqual(embed_page(source).width, 100)
        with self.assertRaises(IndexError):
            embed_page(source, 1)
        source.close()


class DocumentMetadataTest(unittest.TestCase):
    def setUp(self) -> None:
        self.document = create_pdf()
        add_page(self.document, 100, 100)

    def tearDown(self) -> None:
        self.document.close()

    def test_valid_fields_are_written(self) -> None:
        metadata = DocumentMetadata(
            title="Quarterly report",
            author="Finance",
            keywords=["report", "q3"],
            creation_date=datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        )
        set_document_metadata(self.document, metadata)
        saved = load_pdf(save_pdf(self.document))

        self.assertEqual(saved.metadata["title"], "Quarterly report")
        self.assertEqual(saved.metadata["author"], "Finance")
        self.assertEqual(saved.metadata["keywords"], "report, q3")
        self.assertTrue(saved.metadata["creationDate"].startswith("D:20240102030405"))
        saved.close()

    def test_invalid_fields_are_skipped_individually(self) -> None:
        metadata = DocumentMetadata(title="Kept", keywords=[], subject=42, creation_date="yesterday")
        set_document_metadata(self.document, metadata)

        self.assertEqual(self.document.metadata["title"], "Kept")
        self.assertFalse(self.document.metadata["keywords"])
        self.assertFalse(self.document.metadata["subject"])

    def test_empty_metadata_changes_nothing(self) -> None:
        before = dict(self.document.metadata)
        set_document_metadata(self.document, DocumentMetadata())
        set_document_metadata(self.document, None)
        self.assertEqual(dict(self.document.metadata), before)


if __name__ == "__main__":
    unittest.main()
