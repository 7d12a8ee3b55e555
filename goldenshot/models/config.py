"""Configuration models for golden screenshot comparison."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, Field, field_validator

UPDATE_GOLDENS_ENV = "UPDATE_GOLDENS"

# Exact string match only; "TRUE", "yes" etc. leave update mode off.
_UPDATE_TRUTHY = ("1", "true")


class ComparisonOptions(BaseModel):
    strict: bool = False
    tolerance: float = 2.5  # CIEDE2000 distance allowed per pixel

    @field_validator("tolerance")
    @classmethod
    def check_tolerance(cls, v: float) -> float:
        if v < 0:
            raise ValueError("tolerance must be >= 0")
        return v

    def merged(self, overrides: ComparisonOptions | Mapping | None = None) -> ComparisonOptions:
        """Return a copy with the caller's options applied field by field.

        Only fields the caller actually supplied override; a ComparisonOptions
        instance contributes the fields that were set explicitly on it.
        """
        if overrides is None:
            return self.model_copy()
        if isinstance(overrides, ComparisonOptions):
            updates = overrides.model_dump(exclude_unset=True)
        else:
            unknown = set(overrides) - set(type(self).model_fields)
            if unknown:
                raise ValueError(f"Unknown comparison option(s): {', '.join(sorted(unknown))}")
            updates = dict(overrides)
        return type(self)(**{**self.model_dump(), **updates})


class GoldenConfig(BaseModel):
    # Golden handling
    update_goldens: bool = False

    # Diff artifacts
    output_folder: Optional[str] = None
    highlight_color: str = "#ff00ff"

    # Comparison defaults
    options: ComparisonOptions = Field(default_factory=ComparisonOptions)

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        base: GoldenConfig | None = None,
    ) -> "GoldenConfig":
        """Build a config whose update flag comes from UPDATE_GOLDENS.

        When ``base`` is given, every other setting is taken from it.
        """
        environ = os.environ if environ is None else environ
        update = environ.get(UPDATE_GOLDENS_ENV) in _UPDATE_TRUTHY
        if base is None:
            return cls(update_goldens=update)
        return base.model_copy(update={"update_goldens": update})

    @field_validator("output_folder")
    @classmethod
    def blank_output_folder(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v

    @classmethod
    def load(cls, path: str | Path, environ: Mapping[str, str] | None = None) -> "GoldenConfig":
        """Load comparison settings from a JSON file.

        Update mode is a per-run switch: it always comes from UPDATE_GOLDENS,
        never from the file.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        data.pop("update_goldens", None)
        return cls.from_env(environ, base=cls(**data))

    def save(self, path: str | Path) -> None:
        """Save the comparison settings (not the update flag) to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(exclude={"update_goldens"}), f, indent=2)
