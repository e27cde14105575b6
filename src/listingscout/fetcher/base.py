from typing import Dict, Any, List, Optional
from dataclasses import dataclass, field

DEFAULT_VERSION = "1.0.0"
DEFAULT_DOWNLOAD_COUNT = "10,000+"


@dataclass
class ListingQuery:
    identifier: str


@dataclass
class ListingRecord:
    name: str
    description: str = ""
    short_description: str = ""
    developer_name: str = ""
    category: str = ""
    sub_category: Optional[str] = None
    icon_url: str = ""
    screenshot_urls: List[str] = field(default_factory=list)
    rating: float = 0.0
    version: str = DEFAULT_VERSION
    download_count_label: str = DEFAULT_DOWNLOAD_COUNT

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "shortDescription": self.short_description,
            "developerName": self.developer_name,
            "category": self.category,
            "subCategory": self.sub_category,
            "iconUrl": self.icon_url,
            "screenshotUrls": list(self.screenshot_urls),
            "rating": self.rating,
            "version": self.version,
            "downloadCountLabel": self.download_count_label,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ListingRecord":
        return cls(
            name=data.get("name") or "",
            description=data.get("description") or "",
            short_description=data.get("shortDescription") or "",
            developer_name=data.get("developerName") or "",
            category=data.get("category") or "",
            sub_category=data.get("subCategory"),
            icon_url=data.get("iconUrl") or "",
            screenshot_urls=list(data.get("screenshotUrls") or []),
            rating=float(data.get("rating") or 0),
            version=data.get("version") or DEFAULT_VERSION,
            download_count_label=data.get("downloadCountLabel") or DEFAULT_DOWNLOAD_COUNT,
        )


class BaseFetcher:
    def fetch_listing(self, identifier: str) -> ListingRecord:
        raise NotImplementedError

    def fetch(self, query: ListingQuery) -> ListingRecord:
        return self.fetch_listing(query.identifier)
