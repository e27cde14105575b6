from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import os
import yaml
import logging

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


@dataclass
class FetcherConfig:
    base_url: str = "https://play.google.com/store/apps/details"
    language: str = "en"
    timeout_seconds: float = 10
    user_agent: str = DEFAULT_USER_AGENT
    accept_language: str = "en-US,en;q=0.9"


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 8080
    api_tokens: List[str] = field(default_factory=list)


@dataclass
class ClientConfig:
    base_url: str = "http://localhost:8080"
    timeout_seconds: float = 15
    token: Optional[str] = None


@dataclass
class Config:
    fetcher: FetcherConfig = field(default_factory=FetcherConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    client: ClientConfig = field(default_factory=ClientConfig)
    logging: Dict[str, Any] = field(default_factory=lambda: {"level": "INFO"})


def load_config(path: Optional[str] = None) -> Config:
    if not path or not os.path.exists(path):
        if path:
            logger.info("Config file %s not found; using defaults", path)
        return Config()

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping at the top level")

    fc = data.get("fetcher", {}) or {}
    defaults = FetcherConfig()
    fetcher = FetcherConfig(
        base_url=fc.get("base_url", defaults.base_url),
        language=fc.get("language", defaults.language),
        timeout_seconds=float(fc.get("timeout_seconds", defaults.timeout_seconds)),
        user_agent=fc.get("user_agent", defaults.user_agent),
        accept_language=fc.get("accept_language", defaults.accept_language),
    )

    s = data.get("server", {}) or {}
    server = ServerConfig(
        host=s.get("host", "0.0.0.0"),
        port=int(s.get("port", 8080)),
        api_tokens=[str(t) for t in s.get("api_tokens", []) or []],
    )

    c = data.get("client", {}) or {}
    client = ClientConfig(
        base_url=c.get("base_url", "http://localhost:8080"),
        timeout_seconds=float(c.get("timeout_seconds", 15)),
        token=c.get("token"),
    )

    return Config(
        fetcher=fetcher,
        server=server,
        client=client,
        logging=data.get("logging", {"level": "INFO"}),
    )
