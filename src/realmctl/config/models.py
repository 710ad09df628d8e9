"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults live here, ``realmctl.toml`` only contains
overrides. Pointing the client at a server needs nothing but
``[client] address``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

# --- realmctl.toml sections ---


class ClientConfig(BaseModel):
    """[client] section."""

    model_config = {"frozen": True}

    address: str = "http://localhost:8080"
    timeout: float = Field(default=15.0, gt=0)
    api_prefix: str = "v1"


class BrowseConfig(BaseModel):
    """[browse] section."""

    model_config = {"frozen": True}

    root_label: str = "root"
    show_self_marker: bool = False


class RealmConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    client: ClientConfig = Field(default_factory=ClientConfig)
    browse: BrowseConfig = Field(default_factory=BrowseConfig)
