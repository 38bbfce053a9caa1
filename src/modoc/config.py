"""Retriever configuration."""

from __future__ import annotations

import os
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field


class RetrieverConfig(BaseModel):
    """Read-only settings shared by every per-module extraction.

    Example:
        config = RetrieverConfig(
            source_root="/src/app",
            source_url_pattern="https://example.com/app/blob/main/%{path}#L%{line}",
        )
    """

    model_config = ConfigDict(frozen=True)

    source_root: str | None = None
    source_url_pattern: str | None = None  # None disables source links
    max_workers: int = Field(default=4, ge=1)
    bootstrap_modules: frozenset[str] = frozenset({"elixir_bootstrap"})

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RetrieverConfig:
        """Build a config from MODOC_* environment variables.

        Raises:
            pydantic.ValidationError: If a variable holds an invalid value.
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {
            "source_root": env.get("MODOC_SOURCE_ROOT") or None,
            "source_url_pattern": env.get("MODOC_SOURCE_URL") or None,
        }
        if env.get("MODOC_MAX_WORKERS"):
            values["max_workers"] = env["MODOC_MAX_WORKERS"]
        return cls(**values)
