from __future__ import annotations

import pytest

from listingscout.classifier import KeywordRule, classify_subcategory


@pytest.mark.parametrize("category", ["Video Players & Editors", "Entertainment", "Video"])
def test_video_categories_always_get_a_subcategory(category) -> None:
    assert classify_subcategory(category, "Plain Player", "Plays things.") == "Videos"


def test_non_video_category_has_no_subcategory() -> None:
    assert classify_subcategory("Tools", "Movie Maker", "Edit film and cinema clips") is None
    assert classify_subcategory("", "Movie Maker", "") is None


def test_movie_keywords_win_over_short_video_keywords() -> None:
    assert classify_subcategory("Video", "ClipBox", "Short clips from every movie") == "Movies"


def test_short_video_keywords() -> None:
    assert classify_subcategory("Entertainment", "Reelz", "Share reels with friends") == "Short Videos"
    assert classify_subcategory("Video", "Tok", "A TikTok style feed") == "Short Videos"


def test_matching_is_case_insensitive_over_name_and_description() -> None:
    assert classify_subcategory("Video", "CINEMA Hub", "") == "Movies"
    assert classify_subcategory("Video", "Hub", "Home THEATER streaming") == "Movies"


def test_custom_rules_and_default() -> None:
    rules = (KeywordRule(frozenset({"anime"}), "Anime"),)
    assert classify_subcategory("Video", "Anime Now", "", rules=rules) == "Anime"
    assert classify_subcategory("Video", "Other", "", rules=rules, default="Misc") == "Misc"
