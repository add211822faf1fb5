"""Rotation configuration loading and validation.

Configuration is resolved once at startup and passed explicitly to the
``Rotator``.  Sources, highest precedence first:

1. CLI options (applied by the caller with ``RotationConfig.model_copy``).
2. A JSON file given with ``--config``::

       {
           "resource_groups": ["rg-app-dev", "rg-app-prod"],
           "secret_prefix": "sacsc",
           "subscription_id": "00000000-0000-0000-0000-000000000000"
       }

3. The ``resource_groups`` environment variable (space separated).
4. Built-in defaults.

Keys prefixed with "_" are reserved (e.g. "_comment") and are stripped on load.
"""

import json
import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from sasrotate.constants import (
    DEFAULT_RESOURCE_GROUPS,
    DEFAULT_SECRET_PREFIX,
    RESOURCE_GROUPS_ENV_VAR,
)


class RotationConfig(BaseModel):
    """Which resource groups to visit and which secrets to rotate in them."""

    model_config = ConfigDict(extra="forbid")

    resource_groups: list[str] = Field(default_factory=lambda: list(DEFAULT_RESOURCE_GROUPS))
    secret_prefix: str = DEFAULT_SECRET_PREFIX
    subscription_id: str | None = None

    @field_validator("resource_groups")
    @classmethod
    def _no_blank_groups(cls, value: list[str]) -> list[str]:
        groups = [g.strip() for g in value]
        if any(not g for g in groups):
            raise ValueError("resource group names must not be blank")
        return groups

    @field_validator("secret_prefix")
    @classmethod
    def _non_empty_prefix(cls, value: str) -> str:
        if not value:
            raise ValueError("secret_prefix must not be empty")
        return value


class ConfigError(Exception):
    """Raised when configuration cannot be read, parsed or validated."""


def load_config(
    path: Path | None = None, environ: Mapping[str, str] | None = None
) -> RotationConfig:
    """Resolve the rotation configuration.

    With ``path`` the JSON file is the only source besides defaults; a
    missing or malformed file raises ConfigError.  Without it the
    ``resource_groups`` environment variable is consulted, falling back to
    the built-in resource groups when unset or blank.
    """
    if path is not None:
        return _load_file(path)

    if environ is None:
        environ = os.environ
    raw_groups = environ.get(RESOURCE_GROUPS_ENV_VAR, "")
    if not raw_groups.strip():
        return RotationConfig()
    return RotationConfig(resource_groups=raw_groups.split())


def _load_file(path: Path) -> RotationConfig:
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        raw: object = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        raise ConfigError(f"{path.name} is not valid JSON: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError(f"{path.name} must be a JSON object at the top level")

    # Strip reserved/comment keys.
    data = {k: v for k, v in raw.items() if not k.startswith("_")}

    try:
        return RotationConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config in {path.name}: {exc}") from exc
