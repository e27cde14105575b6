"""Reader for the ``application/ld+json`` blocks embedded in listing pages."""
from typing import Any, Dict, Iterator, List, Optional
import json
import logging

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

LD_JSON_SELECTOR = 'script[type="application/ld+json"]'
APP_TYPES = frozenset({"SoftwareApplication", "MobileApplication", "VideoGame", "WebApplication"})


def _flatten(node: Any) -> Iterator[Dict[str, Any]]:
    if isinstance(node, list):
        for item in node:
            yield from _flatten(item)
    elif isinstance(node, dict):
        yield node
        if "@graph" in node:
            yield from _flatten(node["@graph"])


def _is_app(obj: Dict[str, Any]) -> bool:
    types = obj.get("@type")
    if not isinstance(types, list):
        types = [types]
    return any(t in APP_TYPES for t in types if isinstance(t, str))


def parse_structured_data(soup: BeautifulSoup) -> List[Dict[str, Any]]:
    """Return every JSON object found in the page's structured data blocks.

    Blocks that fail to parse are logged and skipped, so one malformed block
    does not hide the others. Objects describing an application come first,
    in page order, followed by everything else.
    """
    objects: List[Dict[str, Any]] = []
    for script in soup.select(LD_JSON_SELECTOR):
        raw = script.string or script.get_text()
        if not raw or not raw.strip():
            continue
        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.debug("Skipping malformed structured data block: %s", e)
            continue
        objects.extend(_flatten(data))
    return sorted(objects, key=lambda obj: not _is_app(obj))


def lookup(objects: List[Dict[str, Any]], *path: str) -> Optional[Any]:
    """First non-empty value at ``path`` across ``objects``.

    ``lookup(objs, "author", "name")`` reads ``obj["author"]["name"]``; a list
    encountered along the way contributes its first element.
    """
    for obj in objects:
        value: Any = obj
        for key in path:
            if isinstance(value, list):
                value = value[0] if value else None
            if not isinstance(value, dict):
                value = None
                break
            value = value.get(key)
        if value not in (None, "", [], {}):
            return value
    return None
