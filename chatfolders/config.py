# -*- coding: utf-8 -*-

from configparser import RawConfigParser
from typing import Optional

from typing_extensions import TypeAlias

from chatfolders.errors import ConfigError

Settings: TypeAlias = dict[str, dict[str, str]]

DEFAULT_API_TIMEOUT = 30.0


class Config:
    def __init__(self, filename: str) -> None:
        self.filename = filename

    def load(self) -> Settings:
        config = RawConfigParser(allow_no_value=True)
        config.read(self.filename)
        return {
            section: dict(config.items(section, raw=True))
            for section in config.sections()
        }


def get_api_url(settings: Settings) -> str:
    """
    Get the configured base URL of the folder-invite API, always ending
    with a single slash so that method names can be appended to it.
    """
    url = settings.get("api", {}).get("url")
    if not url:
        raise ConfigError("No API URL configured; set [api] url")
    return url.rstrip("/") + "/"


def get_api_token(settings: Settings) -> Optional[str]:
    return settings.get("api", {}).get("token") or None


def get_api_timeout(settings: Settings) -> float:
    timeout = settings.get("api", {}).get("timeout")
    if not timeout:
        return DEFAULT_API_TIMEOUT
    try:
        return float(timeout)
    except ValueError as e:
        raise ConfigError(f"Invalid API timeout {timeout!r}") from e


def get_store_path(settings: Settings) -> Optional[str]:
    """
    Get the path of the file the folder-filter registry is persisted to.

    An empty or missing value means the registry is kept in memory only.
    """
    return settings.get("store", {}).get("path") or None
