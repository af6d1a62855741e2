"""Settings loader for the Sogenactif platform.

Settings live in an INI file, under a ``[sogenactif]`` section::

    [sogenactif]
    debug = no
    library_path = /opt/sogenactif/bin
    merchants_rootdir = /opt/sogenactif/merchant
    merchant_id = 014213245611111
    cancel_url = http://${SHOP_HOST}/cancel
    return_url = http://${SHOP_HOST}/thanks

URLs may reference environment variables as ``${VARNAME}``. A ``.env`` file
next to the settings file (or in the working directory) is loaded first.
"""

import configparser
import logging
import os
import re
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlsplit

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from sogenactif.errors import ConfigError

logger = logging.getLogger(__name__)

SECTION = "sogenactif"
REQUIRED_URLS = ("cancel_url", "return_url")
URL_KEYS = ("cancel_url", "return_url", "auto_response_url")

_ENV_VAR = re.compile(r"\$\{([A-Z_]+)\}")


class Config(BaseModel):
    """Attributes required by the platform."""

    debug: bool = False
    logo_path: str = "/media/"
    # Directory holding the <os>_<arch>/request and response binaries
    library_path: str = ""
    merchants_rootdir: str = ""
    # Static files (credit card logos etc.)
    media_path: str = "media"
    merchant_id: str = ""
    merchant_country: str = "fr"
    merchant_currency_code: str = "978"
    language: str = ""
    payment_means: str = "CB,2,VISA,2,MASTERCARD,2,PAYLIB,2"
    merchant_logo: str = ""
    binary_timeout: float = Field(default=30.0, gt=0)
    auto_response_url: Optional[str] = None
    cancel_url: str
    return_url: str

    @field_validator("auto_response_url", mode="before")
    @classmethod
    def _blank_is_unset(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def merchant_language(self) -> str:
        return self.language or self.merchant_country

    @property
    def cancel_path(self) -> str:
        return urlsplit(self.cancel_url).path or "/"

    @property
    def return_path(self) -> str:
        return urlsplit(self.return_url).path or "/"

    @property
    def auto_response_path(self) -> Optional[str]:
        if self.auto_response_url is None:
            return None
        return urlsplit(self.auto_response_url).path or "/"


def replace_env_vars(src: str) -> str:
    """Replace every ``${VARNAME}`` in src with its environment value."""
    for name in dict.fromkeys(_ENV_VAR.findall(src)):
        value = os.environ.get(name, "")
        if not value:
            raise ConfigError(f"env var ${{{name}}} not defined")
        src = src.replace(f"${{{name}}}", value)
    return src


def _expand_url(key: str, uri: str) -> str:
    label = key.replace("_url", "").replace("_", " ") + " URL"
    expanded = replace_env_vars(unquote(uri.strip()))
    try:
        parts = urlsplit(expanded)
    except ValueError as e:
        raise ConfigError(f"{label}: {e}") from e
    if not parts.path and not parts.netloc:
        raise ConfigError(f"{label}: invalid URL {expanded!r}")
    return expanded


def _load_env(config_path: Path) -> None:
    for cand in [config_path.parent / ".env", Path.cwd() / ".env"]:
        if cand.is_file():
            load_dotenv(dotenv_path=str(cand), override=False)


def load_config(path) -> Config:
    """Parse a settings file and return the validated Config."""
    config_path = Path(path)
    parser = configparser.ConfigParser(interpolation=None)
    try:
        read = parser.read(config_path, encoding="utf-8")
    except configparser.Error as e:
        raise ConfigError(f"{config_path}: {e}") from e
    if not read:
        raise ConfigError(f"cannot read config file {config_path}")
    if not parser.has_section(SECTION):
        raise ConfigError(f"{config_path}: missing [{SECTION}] section")

    _load_env(config_path)

    section = parser[SECTION]
    values = {key: section[key] for key in Config.model_fields if key in section}
    for key in REQUIRED_URLS:
        if not values.get(key, "").strip():
            raise ConfigError(f"{config_path}: missing {key}")

    # Looks for env variables, performs substitutions if needed
    for key in URL_KEYS:
        if values.get(key, "").strip():
            values[key] = _expand_url(key, values[key])

    try:
        settings = Config(**values)
    except ValidationError as e:
        raise ConfigError(f"{config_path}: {e}") from e
    logger.debug("Loaded settings from %s (merchant %s)", config_path, settings.merchant_id)
    return settings
