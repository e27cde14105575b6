from dataclasses import dataclass
from typing import Any, Optional, Tuple
from PIL import Image, UnidentifiedImageError
import requests
import io
import logging

from .config import ClientConfig
from .errors import ListingClientError
from .fetcher.base import ListingRecord
from .server import LISTING_ROUTE

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "Failed to fetch app info from Play Store"
DEFAULT_MIME_TYPE = "image/jpeg"


@dataclass
class MaterializedFile:
    """Downloaded image held in memory, ready to attach to a multipart upload."""

    filename: str
    mime_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

    def open(self) -> io.BytesIO:
        f = io.BytesIO(self.content)
        f.name = self.filename
        return f

    def as_upload(self) -> Tuple[str, io.BytesIO, str]:
        return (self.filename, self.open(), self.mime_type)


def sniff_mime_type(content: bytes, default: str = DEFAULT_MIME_TYPE) -> str:
    try:
        with Image.open(io.BytesIO(content)) as img:
            return Image.MIME.get(img.format, default)
    except UnidentifiedImageError:
        logger.debug("Could not identify image format; assuming %s", default)
        return default


def _is_success(resp: requests.Response) -> bool:
    return 200 <= resp.status_code < 300


def _error_message(resp: requests.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        data = None
    if data is not None:
        if isinstance(data, dict) and data.get("message"):
            return str(data["message"])
        return DEFAULT_ERROR_MESSAGE
    text = (resp.text or "").strip()
    return text or DEFAULT_ERROR_MESSAGE


class ListingClient:
    def __init__(self, base_url: str, token: Optional[str] = None, timeout: float = 15, session: Any = None):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.http = session if session is not None else requests

    @classmethod
    def from_config(cls, config: ClientConfig, session: Any = None) -> "ListingClient":
        return cls(config.base_url, token=config.token, timeout=config.timeout_seconds, session=session)

    def request_listing(self, identifier: str) -> ListingRecord:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        logger.info("Requesting listing for %s", identifier)
        r = self.http.get(
            f"{self.base_url}{LISTING_ROUTE}",
            params={"packageName": identifier},
            headers=headers,
            timeout=self.timeout,
        )
        if not _is_success(r):
            message = _error_message(r)
            logger.error("Listing request for %s failed (%s): %s", identifier, r.status_code, message)
            raise ListingClientError(message, status=r.status_code)

        try:
            payload = r.json()
        except ValueError as e:
            raise ListingClientError(f"Invalid response from listing API: {e}", status=r.status_code) from e
        if not isinstance(payload, dict):
            raise ListingClientError("Invalid response from listing API", status=r.status_code)
        return ListingRecord.from_dict(payload.get("data") or {})

    def materialize_image(self, url: str, filename: str, mime_type: Optional[str] = DEFAULT_MIME_TYPE) -> MaterializedFile:
        """Download ``url`` and wrap it as a named, typed in-memory file.

        With ``mime_type=None`` the type is detected from the image bytes.
        """
        r = self.http.get(url, timeout=self.timeout)
        if not _is_success(r):
            raise ListingClientError(f"Failed to download image: {r.reason}", status=r.status_code)

        content = r.content
        if mime_type is None:
            mime_type = sniff_mime_type(content)
        logger.debug(f"Materialized {url[:60]} as {filename} ({mime_type}, {len(content)} bytes)")
        return MaterializedFile(filename=filename, mime_type=mime_type, content=content)
