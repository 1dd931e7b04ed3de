"""Share chat folders through invite links and keep them in sync locally."""

import os
import sys
from importlib.metadata import PackageNotFoundError, version

from chatfolders.config import Config

__author__ = "ChatFolders Developers"
__url__ = "https://github.com/chatfolders/chatfolders"
__license__ = "GPLv3"


if sys.platform in ("win32", "darwin"):
    import certifi

    # Workaround for broken-by-default certificate verification on Windows.
    # See https://github.com/twisted/treq/issues/94#issuecomment-116226820
    os.environ["SSL_CERT_FILE"] = certifi.where()


pkgdir = os.path.dirname(os.path.realpath(__file__))
pkgdir_resources = os.path.join(pkgdir, "resources")


settings = Config(os.path.join(pkgdir_resources, "config.txt")).load()


for envvar, value in os.environ.items():
    if envvar.startswith("CHATFOLDERS_"):
        words = envvar.split("_")
        if len(words) >= 3:
            section = words[1].lower()
            option = "_".join(words[2:]).lower()
            try:
                settings[section][option] = value
            except KeyError:
                settings[section] = {option: value}


try:
    APP_NAME = settings["application"]["name"]
except KeyError:
    APP_NAME = "ChatFolders"


if sys.platform == "win32":
    config_dir = os.path.join(str(os.getenv("APPDATA")), APP_NAME)
elif sys.platform == "darwin":
    config_dir = os.path.join(
        os.path.expanduser("~"), "Library", "Application Support", APP_NAME
    )
else:
    config_home = os.environ.get(
        "XDG_CONFIG_HOME", os.path.join(os.path.expanduser("~"), ".config")
    )
    config_dir = os.path.join(config_home, APP_NAME.lower())


try:
    __version__ = version("chatfolders")
except PackageNotFoundError:
    __version__ = "Unknown"
