from __future__ import annotations

import io

import pytest
from PIL import Image

from listingscout.client import ListingClient, MaterializedFile, sniff_mime_type
from listingscout.config import ClientConfig
from listingscout.errors import ListingClientError
from listingscout.server import LISTING_ROUTE


def _png_bytes() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (4, 4), color=(255, 0, 0)).save(buf, format="PNG")
    return buf.getvalue()


def test_request_listing_returns_record(make_session, make_response) -> None:
    payload = {
        "success": True,
        "data": {
            "name": "Pixel Notes",
            "developerName": "Pixel Labs",
            "screenshotUrls": ["a.png"],
            "rating": 4.5,
            "subCategory": None,
        },
    }
    session = make_session(lambda url, **kw: make_response(json_data=payload))
    client = ListingClient("http://api.local/", token="s3cret", session=session)

    record = client.request_listing("com.pixel.notes")

    assert record.name == "Pixel Notes"
    assert record.developer_name == "Pixel Labs"
    assert record.screenshot_urls == ["a.png"]
    assert record.rating == 4.5
    assert record.version == "1.0.0"
    call = session.calls[0]
    assert call["url"] == f"http://api.local{LISTING_ROUTE}"
    assert call["params"] == {"packageName": "com.pixel.notes"}
    assert call["headers"]["Authorization"] == "Bearer s3cret"


def test_error_message_prefers_json_body(make_session, make_response) -> None:
    session = make_session(
        lambda url, **kw: make_response(status_code=404, json_data={"success": False, "message": "App not found"})
    )
    with pytest.raises(ListingClientError) as exc:
        ListingClient("http://api.local", session=session).request_listing("com.example.missingapp")
    assert str(exc.value) == "App not found"
    assert exc.value.status == 404


def test_error_message_falls_back_to_raw_text(make_session, make_response) -> None:
    session = make_session(lambda url, **kw: make_response(status_code=502, text="Bad gateway upstream"))
    with pytest.raises(ListingClientError) as exc:
        ListingClient("http://api.local", session=session).request_listing("com.example.app")
    assert str(exc.value) == "Bad gateway upstream"


def test_error_message_generic_fallback(make_session, make_response) -> None:
    session = make_session(lambda url, **kw: make_response(status_code=500, text="   "))
    with pytest.raises(ListingClientError) as exc:
        ListingClient("http://api.local", session=session).request_listing("com.example.app")
    assert str(exc.value) == "Failed to fetch app info from Play Store"


def test_materialize_image_wraps_bytes(make_session, make_response) -> None:
    content = _png_bytes()
    session = make_session(lambda url, **kw: make_response(content=content))
    client = ListingClient("http://api.local", session=session)

    f = client.materialize_image("https://img.example/icon.png", "icon.png", "image/png")

    assert isinstance(f, MaterializedFile)
    assert f.filename == "icon.png"
    assert f.mime_type == "image/png"
    assert f.size == len(content)
    name, fileobj, mime = f.as_upload()
    assert name == "icon.png"
    assert fileobj.name == "icon.png"
    assert fileobj.read() == content
    assert mime == "image/png"


def test_materialize_image_defaults_to_jpeg(make_session, make_response) -> None:
    session = make_session(lambda url, **kw: make_response(content=b"\x00\x01"))
    f = ListingClient("http://api.local", session=session).materialize_image("https://img.example/x", "x.jpg")
    assert f.mime_type == "image/jpeg"


def test_materialize_image_sniffs_type_when_unspecified(make_session, make_response) -> None:
    session = make_session(lambda url, **kw: make_response(content=_png_bytes()))
    f = ListingClient("http://api.local", session=session).materialize_image(
        "https://img.example/shot", "shot", mime_type=None
    )
    assert f.mime_type == "image/png"


def test_sniff_unknown_bytes_uses_default() -> None:
    assert sniff_mime_type(b"not an image") == "image/jpeg"


def test_materialize_image_failure_carries_status_text(make_session, make_response) -> None:
    session = make_session(lambda url, **kw: make_response(status_code=404, text="", reason="Not Found"))
    with pytest.raises(ListingClientError) as exc:
        ListingClient("http://api.local", session=session).materialize_image("https://img.example/gone", "gone.png")
    assert str(exc.value) == "Failed to download image: Not Found"
    assert exc.value.status == 404


@pytest.mark.parametrize("status", [301, 302, 304])
def test_redirect_status_is_not_a_listing(make_session, make_response, status) -> None:
    session = make_session(lambda url, **kw: make_response(status_code=status, text="", reason="Redirect"))
    with pytest.raises(ListingClientError) as exc:
        ListingClient("http://api.local", session=session).request_listing("com.example.app")
    assert exc.value.status == status


@pytest.mark.parametrize("status", [302, 304])
def test_redirect_status_is_not_an_image(make_session, make_response, status) -> None:
    session = make_session(lambda url, **kw: make_response(status_code=status, text="moved", reason="Found"))
    with pytest.raises(ListingClientError) as exc:
        ListingClient("http://api.local", session=session).materialize_image("https://img.example/x", "x.png")
    assert str(exc.value) == "Failed to download image: Found"
    assert exc.value.status == status


def test_non_json_success_body_raises_client_error(make_session, make_response) -> None:
    session = make_session(lambda url, **kw: make_response(status_code=200, text="<html>login</html>"))
    with pytest.raises(ListingClientError) as exc:
        ListingClient("http://api.local", session=session).request_listing("com.example.app")
    assert exc.value.status == 200


def test_json_error_without_message_uses_generic_message(make_session, make_response) -> None:
    session = make_session(lambda url, **kw: make_response(status_code=500, json_data={"error": "boom"}))
    with pytest.raises(ListingClientError) as exc:
        ListingClient("http://api.local", session=session).request_listing("com.example.app")
    assert str(exc.value) == "Failed to fetch app info from Play Store"


def test_from_config_uses_client_settings(make_session, make_response) -> None:
    session = make_session(lambda url, **kw: make_response(json_data={"success": True, "data": {"name": "Cfg"}}))
    config = ClientConfig(base_url="http://scout.internal:9000/", timeout_seconds=7, token="abc")

    record = ListingClient.from_config(config, session=session).request_listing("com.example.cfg")

    assert record.name == "Cfg"
    call = session.calls[0]
    assert call["url"] == f"http://scout.internal:9000{LISTING_ROUTE}"
    assert call["timeout"] == 7
    assert call["headers"]["Authorization"] == "Bearer abc"
