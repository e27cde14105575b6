from typing import Callable, Optional
import logging

from flask import Flask, Request, jsonify, request

from .config import Config
from .errors import FetchError, NotFoundError
from .fetcher.base import BaseFetcher
from .fetcher.playstore import PlayStoreFetcher

logger = logging.getLogger(__name__)

LISTING_ROUTE = "/api/developer/play-store-info"

Authenticator = Callable[[Request], bool]


def bearer_token_gate(tokens) -> Authenticator:
    """Accept requests carrying ``Authorization: Bearer <token>`` for a known token.

    With no tokens configured every request is let through.
    """
    allowed = set(tokens or [])

    def authenticate(req: Request) -> bool:
        if not allowed:
            return True
        header = req.headers.get("Authorization", "")
        scheme, _, token = header.partition(" ")
        return scheme.lower() == "bearer" and token.strip() in allowed

    return authenticate


def create_app(
    config: Optional[Config] = None,
    fetcher: Optional[BaseFetcher] = None,
    authenticate: Optional[Authenticator] = None,
) -> Flask:
    config = config or Config()
    fetcher = fetcher or PlayStoreFetcher(config.fetcher)
    if authenticate is None:
        if not config.server.api_tokens:
            logger.warning("No API tokens configured; %s is open to every caller", LISTING_ROUTE)
        authenticate = bearer_token_gate(config.server.api_tokens)

    app = Flask(__name__)

    @app.route("/")
    def home():
        return "listingscout API running"

    @app.route(LISTING_ROUTE)
    def play_store_info():
        if not authenticate(request):
            return jsonify({"success": False, "message": "Authentication required"}), 401

        package_name = (request.args.get("packageName") or "").strip()
        if not package_name:
            return jsonify({"success": False, "message": "Package name is required"}), 400

        try:
            record = fetcher.fetch_listing(package_name)
        except NotFoundError as e:
            logger.info("No listing for %s: %s", package_name, e)
            return jsonify({
                "success": False,
                "message": "App not found on Play Store or couldn't retrieve information",
            }), 404
        except FetchError as e:
            logger.warning("Upstream failure for %s: %s", package_name, e)
            return jsonify({
                "success": False,
                "message": "Failed to fetch app info from Play Store",
                "error": str(e),
            }), 502
        except Exception as e:
            logger.exception("Error fetching Play Store app info for %s", package_name)
            return jsonify({
                "success": False,
                "message": "Failed to fetch app info from Play Store",
                "error": str(e),
            }), 500

        return jsonify({"success": True, "data": record.to_dict()})

    return app
