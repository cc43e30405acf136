"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, funnelctl.toml only contains
overrides. An empty (or missing) file is a valid configuration.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from funnelctl.services.guard import DEFAULT_COOLDOWN_MS
from funnelctl.services.history import MAX_HISTORY
from funnelctl.services.persistence import DEFAULT_STORE_KEY

StoreBackend = Literal["file", "sqlite", "memory"]


class HistoryConfig(BaseModel):
    """[history] section."""

    model_config = {"frozen": True}

    limit: int = Field(default=MAX_HISTORY, ge=1)


class StoreConfig(BaseModel):
    """[store] section.

    ``path`` is a directory, relative to the project root unless absolute.
    The ``file`` backend writes one JSON file per key there; ``sqlite``
    keeps ``funnelctl.db`` in it.
    """

    model_config = {"frozen": True}

    backend: StoreBackend = "file"
    key: str = DEFAULT_STORE_KEY
    path: str = ".funnelctl"


class GuardConfig(BaseModel):
    """[guard] section."""

    model_config = {"frozen": True}

    cooldown_ms: int = Field(default=DEFAULT_COOLDOWN_MS, ge=0)

