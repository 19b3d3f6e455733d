"""Build configuration.

Defaults match an Astro-style site layout: documents under ``src/content``,
generated artifacts under ``src/data``.  Environment variables override the
defaults, explicit keyword arguments override both.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

ENV_PREFIX = "CONTENTMAP_"

_TRUTHY = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True)
class BuildConfig:
    content_root: Path = Path("src/content")
    out_dir: Path = Path("src/data")
    map_filename: str = "content-map.json"
    health_filename: str = "content-health.json"
    identifier_field: str = "identifier"
    extensions: tuple[str, ...] = (".md", ".mdx")
    strict: bool = False

    def __post_init__(self) -> None:
        if not self.identifier_field:
            raise ValueError("identifier_field must be a non-empty string")
        if not self.extensions:
            raise ValueError("at least one markdown extension is required")
        # Accept str paths and extensions given with or without a dot
        object.__setattr__(self, "content_root", Path(self.content_root))
        object.__setattr__(self, "out_dir", Path(self.out_dir))
        object.__setattr__(
            self,
            "extensions",
            tuple(e.lower() if e.startswith(".") else f".{e.lower()}" for e in self.extensions),
        )

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None, **overrides: Any) -> "BuildConfig":
        """Build a config from ``CONTENTMAP_*`` variables plus *overrides*.

        ``None`` overrides are ignored so argparse defaults can be passed
        straight through.
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        if env.get(f"{ENV_PREFIX}CONTENT_ROOT"):
            values["content_root"] = env[f"{ENV_PREFIX}CONTENT_ROOT"]
        if env.get(f"{ENV_PREFIX}OUT_DIR"):
            values["out_dir"] = env[f"{ENV_PREFIX}OUT_DIR"]
        if env.get(f"{ENV_PREFIX}IDENTIFIER_FIELD"):
            values["identifier_field"] = env[f"{ENV_PREFIX}IDENTIFIER_FIELD"]
        if env.get(f"{ENV_PREFIX}STRICT"):
            values["strict"] = env[f"{ENV_PREFIX}STRICT"].strip().lower() in _TRUTHY
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def with_overrides(self, **overrides: Any) -> "BuildConfig":
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @property
    def map_path(self) -> Path:
        return self.out_dir / self.map_filename

    @property
    def health_path(self) -> Path:
        return self.out_dir / self.health_filename


def warn_on_unresolved_default(environ: dict[str, str] | None = None) -> bool:
    """Unresolved-link warnings are on everywhere except production."""
    env = os.environ if environ is None else environ
    stage = env.get(f"{ENV_PREFIX}ENV") or env.get("NODE_ENV") or ""
    return stage.strip().lower() != "production"
