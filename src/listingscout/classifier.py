from dataclasses import dataclass
from typing import FrozenSet, Optional, Sequence
import logging

logger = logging.getLogger(__name__)

VIDEO_CATEGORIES = frozenset({"Video Players & Editors", "Entertainment", "Video"})
DEFAULT_VIDEO_SUBCATEGORY = "Videos"


@dataclass(frozen=True)
class KeywordRule:
    keywords: FrozenSet[str]
    tag: str

    def matches(self, text: str) -> bool:
        return any(kw in text for kw in self.keywords)


VIDEO_RULES = (
    KeywordRule(frozenset({"movie", "film", "cinema", "theater"}), "Movies"),
    KeywordRule(frozenset({"short", "clip", "tiktok", "reels"}), "Short Videos"),
)


def classify_subcategory(
    category: str,
    name: str,
    description: str,
    rules: Sequence[KeywordRule] = VIDEO_RULES,
    default: str = DEFAULT_VIDEO_SUBCATEGORY,
) -> Optional[str]:
    """Video subcategory for apps in a video-adjacent category, else None.

    Rules are checked in order against the lower-cased name and description;
    the first rule with a keyword hit decides the tag.
    """
    if category not in VIDEO_CATEGORIES:
        return None

    text = f"{name} {description}".lower()
    for rule in rules:
        if rule.matches(text):
            logger.debug(f"[SUBCATEGORY] '{name}' classified as {rule.tag}")
            return rule.tag
    return default
