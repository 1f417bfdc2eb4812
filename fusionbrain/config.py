"""Credentials and endpoints for the FusionBrain API.

FusionBrain authenticates every call (except the public styles listing)
with a pair of headers built from an API key and a secret key.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from fusionbrain.errors import FusionBrainConfigError

DEFAULT_ENDPOINT = "https://api-key.fusionbrain.ai"
DEFAULT_STYLES_URL = "http://cdn.fusionbrain.ai/static/styles/key"

_DEFAULT_CONFIG = "config.yaml"
_PLACEHOLDERS = ("YOUR_API_KEY", "YOUR_SECRET_KEY")

API_KEY_ENV = "FUSIONBRAIN_API_KEY"
SECRET_KEY_ENV = "FUSIONBRAIN_SECRET_KEY"


@dataclass(frozen=True)
class FusionBrainConfig:
    """Read-only client configuration.

    Attributes:
        api_key: API key from the FusionBrain account.
        secret_key: Secret key from the FusionBrain account.
        endpoint: Base URL of the API, overridable for compatible services.
        styles_url: URL of the public styles listing.
    """
    api_key: str
    secret_key: str
    endpoint: str = DEFAULT_ENDPOINT
    styles_url: str = DEFAULT_STYLES_URL

    @property
    def auth_headers(self) -> dict[str, str]:
        return {
            "X-Key": f"Key {self.api_key}",
            "X-Secret": f"Secret {self.secret_key}",
        }


def load_config(config_path: str | Path | None = None) -> FusionBrainConfig:
    """Load the configuration from ``config.yaml``.

    Expected layout::

        api:
          api_key: ...
          secret_key: ...
          endpoint: https://api-key.fusionbrain.ai   # optional
          styles_url: http://cdn.fusionbrain.ai/static/styles/key   # optional

    Keys missing from the file are taken from ``FUSIONBRAIN_API_KEY`` and
    ``FUSIONBRAIN_SECRET_KEY``. A missing file is fine when both variables
    are set.

    Raises:
        FileNotFoundError: If the file does not exist and the environment
            does not provide both keys.
        FusionBrainConfigError: If a key is missing or still a placeholder.
    """
    path = Path(config_path or _DEFAULT_CONFIG)
    env_complete = bool(os.environ.get(API_KEY_ENV)) and bool(os.environ.get(SECRET_KEY_ENV))

    section: dict = {}
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise FusionBrainConfigError(f"{path}: expected a mapping at the top level")
        section = loaded.get("api") or {}
        if not isinstance(section, dict):
            raise FusionBrainConfigError(f"{path}: 'api' must be a mapping")
    elif not env_complete:
        raise FileNotFoundError(f"Config file not found: {path}")

    api_key = section.get("api_key") or os.environ.get(API_KEY_ENV, "")
    secret_key = section.get("secret_key") or os.environ.get(SECRET_KEY_ENV, "")

    for name, value in (("api_key", api_key), ("secret_key", secret_key)):
        if not value or value in _PLACEHOLDERS:
            raise FusionBrainConfigError(
                f"'{name}' is not configured. Set 'api.{name}' in {path} "
                f"or the {API_KEY_ENV if name == 'api_key' else SECRET_KEY_ENV} "
                "environment variable."
            )

    return FusionBrainConfig(
        api_key=str(api_key),
        secret_key=str(secret_key),
        endpoint=str(section.get("endpoint") or DEFAULT_ENDPOINT).rstrip("/"),
        styles_url=str(section.get("styles_url") or DEFAULT_STYLES_URL),
    )
