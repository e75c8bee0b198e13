"""JavaScript evaluated inside the browser tab to measure and isolate template regions.

Each constant is a function expression suitable for ``Page.evaluate(script, arg)``.
"""
from __future__ import annotations

SECTION_SELECTOR = "page-background, page-header, page-body, page-footer"
CURRENT_PAGE_NUMBER_SELECTOR = "current-page-number, span.page-number"
TOTAL_PAGES_NUMBER_SELECTOR = "total-pages-number, span.total-pages"

NORMALIZE_TEMPLATE = """
() => {
  document.body.classList.add('pdf');
  document.body.style.margin = '0';
  document.body.style.padding = '0';

  const children = Array.from(document.body.children);
  const freeEls = children.filter(
    (el) => el.tagName !== 'DOCUMENT-PAGE' && el.tagName !== 'SCRIPT' && el.tagName !== 'STYLE'
  );
  const hasDocumentPage = children.some((el) => el.tagName === 'DOCUMENT-PAGE');

  if (freeEls.length && !hasDocumentPage) {
    const docPage = document.createElement('document-page');
    docPage.append(...freeEls);
    document.body.append(docPage);
  } else if (hasDocumentPage) {
    freeEls.forEach((el) => el.remove());
  }
}
"""

TEMPLATE_SETTINGS = """
(opts) => {
  const isFormat = (format) => typeof format === 'string' && Object.keys(opts.size).includes(format);
  const convertMmToPx = (mm, ppi) => Math.round(mm * (ppi / 25.4));
  const getWxH = (str) => {
    const guard = (x) => (x && !isNaN(x) ? x : undefined);
    const [w, h] = str.split('x').map((x) => guard(Number(x)));
    return [w, h ?? w];
  };

  const getPageSettings = (docPageEl, index) => {
    const attrFormat = docPageEl.getAttribute('format');
    const attrPpi = Number(docPageEl.getAttribute('ppi'));
    const attrSize = docPageEl.getAttribute('size');
    const [attrWidth, attrHeight] = attrSize ? getWxH(attrSize) : [];
    const ppi = attrPpi && attrPpi > 0 ? attrPpi : opts.default.ppi;
    const hasSections = !!docPageEl.querySelector('page-header, page-footer, page-background');

    let bodyMarginTop = 0;
    let bodyMarginBottom = 0;
    const pageBodyEl = docPageEl.querySelector('page-body');
    if (pageBodyEl) {
      const style = window.getComputedStyle(pageBodyEl);
      const marginTop = parseFloat(style.marginTop);
      const marginBottom = parseFloat(style.marginBottom);
      bodyMarginTop = isNaN(marginTop) ? 0 : Math.ceil(marginTop);
      bodyMarginBottom = isNaN(marginBottom) ? 0 : Math.ceil(marginBottom);
    }

    let width;
    let height;
    if (isFormat(attrFormat)) {
      width = convertMmToPx(opts.size[attrFormat].width, ppi);
      height = convertMmToPx(opts.size[attrFormat].height, ppi);
    } else if (attrWidth && attrHeight) {
      width = attrWidth;
      height = attrHeight;
    } else {
      width = opts.default.width;
      height = opts.default.height;
    }

    return {index, width, height, bodyMarginTop, bodyMarginBottom, hasSections};
  };

  return Array.from(document.querySelectorAll('document-page')).map(getPageSettings);
}
"""

SECTION_SETTINGS = """
(documentPageIndex) => {
  const variants = ['first', 'last', 'even', 'odd', 'default'];

  const getElementHeight = (el) => Math.ceil(
    Math.max(
      el.clientHeight ?? 0,
      el.offsetHeight ?? 0,
      el.scrollHeight ?? 0,
      el.getBoundingClientRect().height ?? 0
    )
  );

  const getSettings = (el, physicalPageIndex) => {
    let physicalPageType = null;
    if (physicalPageIndex !== null) {
      const selectAttr = el.getAttribute('select');
      physicalPageType = variants.includes(selectAttr) ? selectAttr : 'default';
    }
    return {
      height: getElementHeight(el),
      physicalPageIndex,
      physicalPageType,
      hasCurrentPageNumber: !!el.querySelector('%(current)s'),
      hasTotalPagesNumber: !!el.querySelector('%(total)s'),
    };
  };

  const getSection = (docPageEl, type) => {
    const sectionEl = docPageEl.querySelector(`page-${type}`);
    if (!sectionEl) return [];
    const physicalPageEls = Array.from(sectionEl.querySelectorAll('physical-page'));
    if (!physicalPageEls.length) return [getSettings(sectionEl, null)];
    return physicalPageEls.map((el, index) => getSettings(el, index));
  };

  const docPageEl = document.querySelectorAll('document-page')[documentPageIndex];
  if (!docPageEl) return {headers: [], footers: [], backgrounds: []};

  return {
    headers: getSection(docPageEl, 'header'),
    footers: getSection(docPageEl, 'footer'),
    backgrounds: getSection(docPageEl, 'background'),
  };
}
""" % {"current": CURRENT_PAGE_NUMBER_SELECTOR, "total": TOTAL_PAGES_NUMBER_SELECTOR}

PREPARE_SECTION = """
(opts) => {
  const hideAllExcept = (els, target) => {
    let shown;
    Array.from(els).forEach((el, index) => {
      if ((typeof target === 'number' && index === target) || el.tagName.toLowerCase() === target) {
        el.style.display = 'block';
        shown = el;
      } else {
        el.style.display = 'none';
      }
    });
    return shown;
  };

  const injectNumbers = (el) => {
    if (opts.currentPageNumber) {
      el.querySelectorAll('%(current)s').forEach((node) => {
        node.textContent = String(opts.currentPageNumber);
      });
    }
    if (opts.totalPagesNumber) {
      el.querySelectorAll('%(total)s').forEach((node) => {
        node.textContent = String(opts.totalPagesNumber);
      });
    }
  };

  const secType = opts.sectionType ? `page-${opts.sectionType}` : 'page-body';

  const docPage = hideAllExcept(document.querySelectorAll('document-page'), opts.documentPageIndex);
  if (!docPage) return false;

  const sectionEl = hideAllExcept(docPage.querySelectorAll('%(sections)s'), secType);
  if (!sectionEl) return false;

  // Body margins are passed to the printer instead.
  if (secType === 'page-body') {
    sectionEl.style.marginTop = '0px';
    sectionEl.style.marginBottom = '0px';
  }

  if (!opts.sectionType || opts.physicalPageIndex === null || opts.physicalPageIndex === undefined) {
    injectNumbers(sectionEl);
    return true;
  }

  const subSecEl = hideAllExcept(sectionEl.querySelectorAll('physical-page'), opts.physicalPageIndex);
  if (!subSecEl) return false;

  injectNumbers(subSecEl);
  return true;
}
""" % {
    "current": CURRENT_PAGE_NUMBER_SELECTOR,
    "total": TOTAL_PAGES_NUMBER_SELECTOR,
    "sections": SECTION_SELECTOR,
}

RESET_VISIBILITY = """
() => {
  const hideables = [
    'document-page',
    'page-background',
    'page-header',
    'page-body',
    'page-footer',
    'physical-page',
  ].join(', ');

  document.querySelectorAll(hideables).forEach((el) => {
    if (el.style.display === 'none') {
      el.style.display = 'block';
    }
  });
}
"""
