# wilson_score/params.py
from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .errors import ConfigurationMissing, InvalidArgument
from .metrics import DEFAULT_CONFIDENCE

COLUMN_PARAMS = ("positive_col", "negative_col", "output_col")


class WilsonScoreParams(BaseModel):
    """Transformer configuration. Column names have no defaults."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    positive_col: Optional[str] = None
    negative_col: Optional[str] = None
    output_col: Optional[str] = None
    method: Literal["ranking", "wilson"] = "ranking"
    confidence: float = DEFAULT_CONFIDENCE

    @field_validator("positive_col", "negative_col", "output_col")
    @classmethod
    def _non_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("column name must not be blank")
        return v

    @field_validator("confidence")
    @classmethod
    def _open_unit(cls, v: float) -> float:
        if not (0.0 < v < 1.0):
            raise ValueError("confidence must be strictly between 0 and 1")
        return v

    def require_columns(self) -> None:
        for name in COLUMN_PARAMS:
            if getattr(self, name) is None:
                raise ConfigurationMissing(name)


def _errors_text(e: ValidationError) -> str:
    parts = []
    for err in e.errors():
        loc = ".".join(str(x) for x in err.get("loc", ())) or "params"
        parts.append(f"{loc}: {err.get('msg')}")
    return "; ".join(parts)


def build_params(values: Optional[Dict[str, Any]] = None) -> WilsonScoreParams:
    """Validate a plain dict into WilsonScoreParams, raising InvalidArgument on bad input."""
    try:
        return WilsonScoreParams(**(values or {}))
    except ValidationError as e:
        raise InvalidArgument(f"Invalid parameters: {_errors_text(e)}") from e


def update_param(params: WilsonScoreParams, name: str, value: Any) -> None:
    if name not in WilsonScoreParams.model_fields:
        raise InvalidArgument(f"Unknown parameter: {name}")
    try:
        setattr(params, name, value)
    except ValidationError as e:
        raise InvalidArgument(f"Invalid parameters: {_errors_text(e)}") from e


def load_params_yaml(path: str | Path) -> Dict[str, Any]:
    """Load a YAML parameter file from disk (a mapping, possibly empty)."""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidArgument(f"Parameter file must hold a mapping: {path}")
    return data
