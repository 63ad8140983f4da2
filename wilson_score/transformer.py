# wilson_score/transformer.py
"""
Column-wise Wilson score transformer.

    ws = (WilsonScoreInterval()
          .set_positive_col("positives")
          .set_negative_col("negatives")
          .set_output_col("score"))
    scored = ws.transform(df)

The three column names must be set before use; `method` and `confidence`
have defaults. Parameters persist with `ws.save(path)` / `WilsonScoreInterval.load(path)`.
"""
from __future__ import annotations
import logging
import uuid
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import numpy as np
import pandas as pd

from .errors import InvalidArgument
from .metrics import lower_bounds
from .params import WilsonScoreParams, build_params, update_param
from .persistence import ParamsReader, ParamsWriter

logger = logging.getLogger(__name__)

_PARAM_DOCS = {
    "positive_col": "column holding positive counts",
    "negative_col": "column holding negative counts",
    "output_col": "column to write the score to",
    "method": "ranking (p̂ minus Wilson half-width at z=1.2816) or wilson (lower bound at confidence)",
    "confidence": "confidence level for method=wilson",
}


def _random_uid(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def _count_column(df: pd.DataFrame, col: str) -> np.ndarray:
    s = df[col]
    if len(s) == 0:
        return np.empty(0, dtype=float)
    if pd.api.types.is_bool_dtype(s) or not pd.api.types.is_numeric_dtype(s):
        raise InvalidArgument(f"Column '{col}' must be numeric, got dtype {s.dtype}")
    if s.isna().any():
        raise InvalidArgument(f"Column '{col}' contains nulls")
    values = s.to_numpy(dtype=float)
    if (values < 0).any():
        raise InvalidArgument(f"Column '{col}' contains negative counts")
    if (values != np.floor(values)).any():
        raise InvalidArgument(f"Column '{col}' contains non-integer counts")
    return values


class WilsonScoreInterval:
    uid_prefix = "wilsonScoreInterval"

    def __init__(self, uid: Optional[str] = None, **params: Any):
        self.uid = uid or _random_uid(self.uid_prefix)
        self._params = build_params()
        self._explicit: set = set()
        self.set_params(**params)

    def __repr__(self) -> str:
        return self.uid

    # ---------------- Params ----------------
    def set_params(self, **params: Any) -> "WilsonScoreInterval":
        for name, value in params.items():
            self._set(name, value)
        return self

    def _set(self, name: str, value: Any) -> "WilsonScoreInterval":
        update_param(self._params, name, value)
        self._explicit.add(name)
        return self

    def set_positive_col(self, value: str) -> "WilsonScoreInterval":
        return self._set("positive_col", value)

    def set_negative_col(self, value: str) -> "WilsonScoreInterval":
        return self._set("negative_col", value)

    def set_output_col(self, value: str) -> "WilsonScoreInterval":
        return self._set("output_col", value)

    def set_method(self, value: str) -> "WilsonScoreInterval":
        return self._set("method", value)

    def set_confidence(self, value: float) -> "WilsonScoreInterval":
        return self._set("confidence", value)

    def get_positive_col(self) -> Optional[str]:
        return self._params.positive_col

    def get_negative_col(self) -> Optional[str]:
        return self._params.negative_col

    def get_output_col(self) -> Optional[str]:
        return self._params.output_col

    def get_method(self) -> str:
        return self._params.method

    def get_confidence(self) -> float:
        return self._params.confidence

    def is_set(self, name: str) -> bool:
        return name in self._explicit

    def param_map(self) -> Dict[str, Any]:
        """Explicitly set params only."""
        values = self._params.model_dump()
        return {k: values[k] for k in sorted(self._explicit)}

    @staticmethod
    def param_names() -> List[str]:
        return list(WilsonScoreParams.model_fields)

    @staticmethod
    def default_param_map() -> Dict[str, Any]:
        defaults = WilsonScoreParams().model_dump()
        return {k: v for k, v in defaults.items() if v is not None}

    def explain_params(self) -> str:
        values = self._params.model_dump()
        defaults = self.default_param_map()
        lines = []
        for name, doc in _PARAM_DOCS.items():
            parts = []
            if name in defaults:
                parts.append(f"default: {defaults[name]}")
            if name in self._explicit:
                parts.append(f"current: {values[name]}")
            suffix = f" ({', '.join(parts)})" if parts else " (undefined)"
            lines.append(f"{name}: {doc}{suffix}")
        return "\n".join(lines)

    def copy(self, extra: Optional[Dict[str, Any]] = None) -> "WilsonScoreInterval":
        """Same uid and params, optionally overridden by `extra`."""
        other = type(self)(uid=self.uid, **self.param_map())
        if extra:
            other.set_params(**extra)
        return other

    # ---------------- Transform ----------------
    def transform_schema(self, columns: Iterable[Any]) -> List[Any]:
        """Check configuration against input columns; return the output column list."""
        self._params.require_columns()
        p = self._params
        cols = list(columns)
        for name in (p.positive_col, p.negative_col):
            if name not in cols:
                raise InvalidArgument(f"Input column '{name}' not found. Available: {cols}")
            if cols.count(name) > 1:
                raise InvalidArgument(f"Input column '{name}' appears more than once")
        if p.output_col in cols:
            raise InvalidArgument(f"Output column '{p.output_col}' already exists")
        return cols + [p.output_col]

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        if not isinstance(df, pd.DataFrame):
            raise TypeError("df must be a pandas DataFrame")
        self.transform_schema(df.columns)
        p = self._params

        positives = _count_column(df, p.positive_col)
        negatives = _count_column(df, p.negative_col)
        scores = lower_bounds(positives, negatives, method=p.method, confidence=p.confidence)

        out = df.copy()
        out[p.output_col] = pd.Series(scores, index=df.index, dtype="float64")
        logger.debug("%s scored %d rows (%s) into '%s'", self.uid, len(out), p.method, p.output_col)
        return out

    # ---------------- Persistence ----------------
    def write(self) -> ParamsWriter:
        return ParamsWriter(self)

    def save(self, path: str | Path, overwrite: bool = False) -> None:
        writer = self.write()
        if overwrite:
            writer.overwrite()
        writer.save(path)

    @classmethod
    def read(cls) -> ParamsReader:
        return ParamsReader(cls)

    @classmethod
    def load(cls, path: str | Path) -> "WilsonScoreInterval":
        return cls.read().load(path)


__all__ = ["WilsonScoreInterval"]
