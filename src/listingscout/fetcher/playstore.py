from .base import BaseFetcher, ListingRecord, DEFAULT_DOWNLOAD_COUNT, DEFAULT_VERSION
from .strategies import (
    CATEGORY_STRATEGIES,
    DESCRIPTION_STRATEGIES,
    DEVELOPER_STRATEGIES,
    DOWNLOAD_COUNT_STRATEGIES,
    ICON_STRATEGIES,
    NAME_STRATEGIES,
    RATING_STRATEGIES,
    SHORT_DESCRIPTION_STRATEGIES,
    VERSION_STRATEGIES,
    ListingDocument,
    collect_screenshots,
    derive_short_description,
    first_match,
    parse_rating,
)
from ..classifier import classify_subcategory
from ..config import FetcherConfig
from ..errors import FetchError, NotFoundError
from typing import Any, Optional
import requests
import logging

logger = logging.getLogger(__name__)


class PlayStoreFetcher(BaseFetcher):
    """Fetches a Google Play listing page and normalizes it into a ListingRecord.

    Holds configuration only; every call downloads and parses the page from
    scratch. ``session`` may be any object with a ``requests``-compatible
    ``get`` method and defaults to the ``requests`` module itself.
    """

    def __init__(self, config: Optional[FetcherConfig] = None, session: Any = None):
        self.config = config or FetcherConfig()
        self.http = session if session is not None else requests

    @property
    def headers(self):
        return {
            "User-Agent": self.config.user_agent,
            "Accept-Language": self.config.accept_language,
        }

    def fetch_listing(self, identifier: str) -> ListingRecord:
        if not isinstance(identifier, str) or not identifier.strip():
            raise ValueError("identifier must be a non-empty string")
        identifier = identifier.strip()

        logger.info("Fetching Play Store data for: %s", identifier)
        html = self.download(identifier)
        record = self.extract(identifier, ListingDocument(html))
        logger.info("Successfully fetched Play Store data for: %s", identifier)
        return record

    def download(self, identifier: str) -> str:
        params = {"id": identifier, "hl": self.config.language}
        timeout = self.config.timeout_seconds
        try:
            r = self.http.get(self.config.base_url, params=params, headers=self.headers, timeout=timeout)
        except requests.Timeout as e:
            logger.warning("Timed out fetching %s after %ss", identifier, timeout)
            raise FetchError(identifier, f"Request for {identifier} timed out after {timeout}s") from e
        except requests.RequestException as e:
            logger.warning("Failed to fetch %s: %s", identifier, e)
            raise FetchError(identifier, f"Failed to fetch listing for {identifier}: {e}") from e

        if not 200 <= r.status_code < 300:
            logger.warning("Failed to fetch app data for %s. Status: %s", identifier, r.status_code)
            raise FetchError(
                identifier,
                f"Failed to fetch listing for {identifier}: {r.reason or 'upstream error'}",
                status=r.status_code,
            )
        return r.text

    def extract(self, identifier: str, doc: ListingDocument) -> ListingRecord:
        name = first_match(doc, "name", NAME_STRATEGIES)
        if not name:
            raise NotFoundError(identifier, f"App {identifier} not found on Play Store")

        description = first_match(doc, "description", DESCRIPTION_STRATEGIES)
        summary = first_match(doc, "short_description", SHORT_DESCRIPTION_STRATEGIES, default=None)
        category = first_match(doc, "category", CATEGORY_STRATEGIES)

        return ListingRecord(
            name=name,
            description=description,
            short_description=derive_short_description(summary, description),
            developer_name=first_match(doc, "developer_name", DEVELOPER_STRATEGIES),
            category=category,
            sub_category=classify_subcategory(category, name, description),
            icon_url=first_match(doc, "icon_url", ICON_STRATEGIES),
            screenshot_urls=collect_screenshots(doc),
            rating=parse_rating(first_match(doc, "rating", RATING_STRATEGIES, default=None)),
            version=first_match(doc, "version", VERSION_STRATEGIES, default=DEFAULT_VERSION),
            download_count_label=first_match(
                doc, "download_count_label", DOWNLOAD_COUNT_STRATEGIES, default=DEFAULT_DOWNLOAD_COUNT
            ),
        )


def fetch_listing(identifier: str, config: Optional[FetcherConfig] = None) -> ListingRecord:
    return PlayStoreFetcher(config).fetch_listing(identifier)
