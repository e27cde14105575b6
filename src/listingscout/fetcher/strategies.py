"""Per-field extraction strategies for Play Store listing pages.

Every strategy is a plain function ``ListingDocument -> Optional[value]``.
Fields are extracted by running their strategies in order and keeping the
first non-empty result (see :func:`first_match`). The markup of the listing
page changes between layouts and locales, so each field lists the selector of
the current layout first, then selectors from older layouts, then generic
structural fallbacks, with the embedded structured data slotted in among them.
"""
from typing import Any, Callable, Dict, List, Optional, Sequence
import logging
import math
import re

from bs4 import BeautifulSoup, Tag

from .structured import lookup, parse_structured_data

logger = logging.getLogger(__name__)

TITLE_SUFFIX = " - Apps on Google Play"
IMAGE_HOST = "play-lh.googleusercontent.com"
SCREENSHOT_MARKER = "screenshot"
SCREENSHOT_SIZE_PARAM = "=w526"
ICON_SIZE_PARAM = "=w240-h480"
SHORT_DESCRIPTION_LIMIT = 100
ELLIPSIS = "..."

_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?")


class ListingDocument:
    """Parsed listing page plus its lazily decoded structured data."""

    def __init__(self, html: str):
        self.soup = BeautifulSoup(html, "html.parser")
        self._structured: Optional[List[Dict[str, Any]]] = None

    @property
    def structured(self) -> List[Dict[str, Any]]:
        if self._structured is None:
            self._structured = parse_structured_data(self.soup)
        return self._structured

    def select_one(self, selector: str) -> Optional[Tag]:
        return self.soup.select_one(selector)

    def select(self, selector: str) -> List[Tag]:
        return self.soup.select(selector)


Strategy = Callable[[ListingDocument], Any]


def _collapse(text: str) -> str:
    return " ".join(text.split())


def _named(strategy: Strategy, name: str) -> Strategy:
    strategy.__name__ = name
    return strategy


def _image_url(img: Tag) -> str:
    return (img.get("src") or img.get("data-src") or "").strip()


def _unique(urls: Sequence[str]) -> List[str]:
    seen = set()
    out = []
    for url in urls:
        if url and url not in seen:
            seen.add(url)
            out.append(url)
    return out


def _strip_title_suffix(title: Optional[str]) -> Optional[str]:
    if title and title.endswith(TITLE_SUFFIX):
        title = title[: -len(TITLE_SUFFIX)]
    return title.strip() if title else title


# ---------- strategy factories ----------

def css_text(selector: str, collapse: bool = True) -> Strategy:
    def strategy(doc: ListingDocument) -> Optional[str]:
        el = doc.select_one(selector)
        if el is None:
            return None
        text = el.get_text()
        return _collapse(text) if collapse else text.strip()
    return _named(strategy, f"css_text({selector!r})")


def css_attr(selector: str, attr: str) -> Strategy:
    def strategy(doc: ListingDocument) -> Optional[str]:
        el = doc.select_one(selector)
        if el is None:
            return None
        value = el.get(attr)
        return value.strip() if isinstance(value, str) else None
    return _named(strategy, f"css_attr({selector!r}, {attr!r})")


def image_src(selector: str) -> Strategy:
    """URL of the first matching image, reading ``src`` then lazy-load ``data-src``."""
    def strategy(doc: ListingDocument) -> Optional[str]:
        el = doc.select_one(selector)
        return _image_url(el) if el is not None else None
    return _named(strategy, f"image_src({selector!r})")


def meta_content(selector: str) -> Strategy:
    return css_attr(selector, "content")


def structured(*path: str) -> Strategy:
    def strategy(doc: ListingDocument) -> Optional[str]:
        value = lookup(doc.structured, *path)
        if isinstance(value, list):
            value = value[0] if value else None
        if isinstance(value, dict):
            value = value.get("url")
        if value is None or isinstance(value, (dict, list)):
            return None
        return str(value).strip()
    return _named(strategy, f"structured({'.'.join(path)})")


def following_label(label: str) -> Strategy:
    """Text of the element right after the element whose text is ``label``."""
    def strategy(doc: ListingDocument) -> Optional[str]:
        for node in doc.soup.find_all(string=lambda s: s is not None and s.strip() == label):
            sibling = node.parent.find_next_sibling() if node.parent else None
            if sibling is not None:
                text = _collapse(sibling.get_text())
                if text:
                    return text
        return None
    return _named(strategy, f"following_label({label!r})")


def labelled_row(row: str, label: str, value: str, labels: Sequence[str]) -> Strategy:
    """Value cell of a ``row`` whose ``label`` cell reads one of ``labels``."""
    def strategy(doc: ListingDocument) -> Optional[str]:
        for el in doc.select(row):
            label_el = el.select_one(label)
            if label_el is None or _collapse(label_el.get_text()) not in labels:
                continue
            value_el = el.select_one(value)
            if value_el is not None:
                return _collapse(value_el.get_text())
        return None
    return _named(strategy, f"labelled_row({row!r}, {labels!r})")


def page_title(doc: ListingDocument) -> Optional[str]:
    if doc.soup.title is None:
        return None
    return _strip_title_suffix(_collapse(doc.soup.title.get_text()))


def og_title(doc: ListingDocument) -> Optional[str]:
    return _strip_title_suffix(meta_content('meta[property="og:title"]')(doc))


# ---------- per-field cascades ----------

NAME_STRATEGIES = (
    css_text('h1[itemprop="name"]'),
    css_text("h1.AHFaub"),
    css_text("h1"),
    og_title,
    page_title,
    structured("name"),
)

DESCRIPTION_STRATEGIES = (
    css_text('div[itemprop="description"]', collapse=False),
    css_text("div.DWPxHb", collapse=False),
    structured("description"),
    css_text(".bARER", collapse=False),
)

SHORT_DESCRIPTION_STRATEGIES = (
    meta_content('meta[name="description"]'),
    meta_content('meta[property="og:description"]'),
)

DEVELOPER_STRATEGIES = (
    css_text('a[itemprop="author"]'),
    css_text("a.hrTbp"),
    css_text("div.Vbfug a"),
    following_label("Developer"),
    structured("author", "name"),
)

CATEGORY_STRATEGIES = (
    css_text('a[itemprop="genre"]'),
    css_text("span.T32cc"),
    css_text('a[href*="/store/apps/category/"]'),
    structured("applicationCategory"),
)

ICON_STRATEGIES = (
    image_src("img.T75of"),
    image_src("img.gb_yc"),
    image_src('img[alt="App icon"]'),
    image_src('img[alt="Icon image"]'),
    image_src("img.ujDFqe"),
    meta_content('meta[property="og:image"]'),
    structured("image"),
)

RATING_STRATEGIES = (
    css_text("div.BHMmbe"),
    css_attr("div.pf5lIe div", "aria-label"),
    css_attr('div[aria-label*="stars"]', "aria-label"),
    css_attr('div[aria-label*="Rated"]', "aria-label"),
    css_text("div.TT9eCd"),
    structured("aggregateRating", "ratingValue"),
)

VERSION_STRATEGIES = (
    labelled_row("div.hAyfc", "div.BgcNfc", "span.htlgb", ("Current Version",)),
    labelled_row("div.sMUprd", "div.q078ud", "div.reAt0", ("Version",)),
    following_label("Current Version"),
    structured("softwareVersion"),
)

DOWNLOAD_COUNT_STRATEGIES = (
    labelled_row("div.hAyfc", "div.BgcNfc", "span.htlgb", ("Installs", "Downloads")),
    labelled_row("div.wVqUob", "div.g1rdde", "div.ClM7O", ("Downloads",)),
    labelled_row("div.sMUprd", "div.q078ud", "div.reAt0", ("Downloads",)),
    following_label("Downloads"),
)

SCREENSHOT_SELECTORS = (
    "img.T75of.DYfLw",
    'img[alt="Screenshot"]',
    'img[alt="Screenshot image"]',
    "img.l6OA0e",
    "div.xSyT2c img",
    f'img[src*="{IMAGE_HOST}"][src*="{SCREENSHOT_MARKER}"]',
)


def first_match(doc: ListingDocument, field: str, strategies: Sequence[Strategy], default: Any = "") -> Any:
    """Run ``strategies`` in order and return the first non-empty result.

    A strategy that raises is logged and skipped; it never aborts the field.
    """
    for strategy in strategies:
        try:
            value = strategy(doc)
        except Exception as e:
            logger.debug("%s: strategy %s failed: %s", field, getattr(strategy, "__name__", strategy), e)
            continue
        if value not in (None, "", [], ()):
            logger.debug("%s: matched by %s", field, getattr(strategy, "__name__", strategy))
            return value
    return default


# ---------- screenshots ----------

def screenshots_by_selector(doc: ListingDocument) -> List[str]:
    for selector in SCREENSHOT_SELECTORS:
        urls = _unique([_image_url(img) for img in doc.select(selector)])
        if urls:
            return urls
    return []


def looks_like_screenshot(url: str) -> bool:
    return (
        IMAGE_HOST in url
        and ICON_SIZE_PARAM not in url
        and (SCREENSHOT_SIZE_PARAM in url or SCREENSHOT_MARKER in url)
    )


def screenshots_by_url_heuristic(doc: ListingDocument) -> List[str]:
    return _unique([url for url in map(_image_url, doc.select("img")) if looks_like_screenshot(url)])


def screenshots_from_structured(doc: ListingDocument) -> List[str]:
    urls: List[str] = []
    for key in ("screenshot", "screenshots"):
        value = lookup(doc.structured, key)
        if value is None:
            continue
        items = value if isinstance(value, list) else [value]
        for item in items:
            url = item.get("url") if isinstance(item, dict) else item
            if isinstance(url, str) and url.strip():
                urls.append(url.strip())
        if urls:
            break
    return _unique(urls)


SCREENSHOT_STRATEGIES = (
    screenshots_by_selector,
    screenshots_by_url_heuristic,
    screenshots_from_structured,
)


def collect_screenshots(doc: ListingDocument) -> List[str]:
    return _unique(first_match(doc, "screenshots", SCREENSHOT_STRATEGIES, default=[]))


# ---------- value normalization ----------

def parse_rating(text: Optional[str]) -> float:
    if not text:
        return 0.0
    m = _NUMBER_RE.search(text)
    if not m:
        return 0.0
    try:
        value = float(m.group(0))
    except ValueError:
        return 0.0
    if not math.isfinite(value) or value < 0:
        return 0.0
    return value


def derive_short_description(summary: Optional[str], description: str) -> str:
    if summary:
        return summary
    if not description:
        return ""
    if len(description) > SHORT_DESCRIPTION_LIMIT:
        return description[:SHORT_DESCRIPTION_LIMIT] + ELLIPSIS
    return description
