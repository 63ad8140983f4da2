# wilson_score/functions.py
"""
Named scalar functions usable on table columns and inside SQL text.

    conn = define_udf()                      # in-memory sqlite with functions bound
    df.to_sql("test_data", conn, index=False)
    pd.read_sql("SELECT wilson_score_interval(positives, negatives) AS score FROM test_data", conn)

    df["score"] = call_udf("wilson_score_interval", df["positives"], df["negatives"])
"""
from __future__ import annotations
import logging
import sqlite3
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import numpy as np
import pandas as pd

from .errors import InvalidArgument
from .metrics import lower_bounds, ranking_score, score

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UDF:
    name: str
    func: Callable[..., float]
    arity: int
    vectorized: Optional[Callable[..., np.ndarray]] = None


class FunctionRegistry:
    def __init__(self):
        self._entries: Dict[str, UDF] = {}

    def register(self, name: str, func: Callable[..., float], arity: int,
                 vectorized: Optional[Callable[..., np.ndarray]] = None) -> UDF:
        if not name or not name.isidentifier():
            raise InvalidArgument(f"Function name must be an identifier, got {name!r}")
        if arity < 0:
            raise InvalidArgument(f"arity must be >= 0, got {arity}")
        entry = UDF(name=name, func=func, arity=arity, vectorized=vectorized)
        self._entries[name] = entry
        return entry

    def get(self, name: str) -> UDF:
        try:
            return self._entries[name]
        except KeyError:
            raise InvalidArgument(f"Unknown function '{name}'. Registered: {self.names()}") from None

    def names(self) -> List[str]:
        return sorted(self._entries)

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    # ---------------- Column-wise calls ----------------
    def call(self, name: str, *columns: Any) -> pd.Series:
        """Apply a function over columns (Series/arrays of equal length); returns a float Series."""
        entry = self.get(name)
        if len(columns) != entry.arity:
            raise InvalidArgument(f"{name} takes {entry.arity} arguments, got {len(columns)}")

        index = next((c.index for c in columns if isinstance(c, pd.Series)), None)
        arrays = [np.asarray(c) for c in columns]
        if entry.vectorized is not None:
            values = entry.vectorized(*arrays)
        else:
            values = [entry.func(*row) for row in zip(*arrays)]
        return pd.Series(values, index=index, dtype="float64", name=name)

    # ---------------- SQL binding ----------------
    def _sql_adapter(self, entry: UDF) -> Callable[..., Optional[float]]:
        def _call(*args):
            if any(a is None for a in args):
                return None
            try:
                return entry.func(*args)
            except Exception as e:
                # sqlite only reports "user-defined function raised exception"
                logger.error("%s%r failed: %s", entry.name, args, e)
                raise
        return _call

    def bind(self, connection: sqlite3.Connection) -> sqlite3.Connection:
        for entry in self._entries.values():
            connection.create_function(entry.name, entry.arity, self._sql_adapter(entry), deterministic=True)
            logger.debug("Bound SQL function %s/%d", entry.name, entry.arity)
        return connection


def _default_registry() -> FunctionRegistry:
    reg = FunctionRegistry()
    reg.register(
        "wilson_score_interval", ranking_score, 2,
        vectorized=lambda p, n: lower_bounds(p, n, method="ranking"),
    )
    reg.register(
        "wilson_lower_bound", score, 2,
        vectorized=lambda p, n: lower_bounds(p, n, method="wilson"),
    )
    return reg


registry = _default_registry()


def define_udf(connection: Optional[sqlite3.Connection] = None,
               functions: Optional[FunctionRegistry] = None) -> sqlite3.Connection:
    """Bind the registered functions into `connection` (a fresh in-memory db when None)."""
    conn = connection if connection is not None else sqlite3.connect(":memory:")
    return (functions or registry).bind(conn)


def call_udf(name: str, *columns: Any) -> pd.Series:
    return registry.call(name, *columns)
