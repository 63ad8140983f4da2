# wilson_score/metrics.py
from __future__ import annotations
from typing import Tuple
import numpy as np
from scipy.stats import norm

from .errors import InvalidArgument

DEFAULT_CONFIDENCE = 0.95
# One-sided 90% quantile; the ranking estimate is calibrated on this value.
RANKING_Z = float(norm.ppf(0.9))

METHODS = ("ranking", "wilson")


# ---------------- z helpers ----------------
def z_from_confidence(confidence: float = DEFAULT_CONFIDENCE) -> float:
    """Two-sided z for a (confidence) interval, e.g. 0.95 -> 1.959964."""
    try:
        c = float(confidence)
    except (TypeError, ValueError):
        raise InvalidArgument(f"confidence must be a number, got {confidence!r}") from None
    if not (0.0 < c < 1.0):
        raise InvalidArgument(f"confidence must be strictly between 0 and 1, got {confidence!r}")
    return float(norm.ppf(1 - (1 - c) / 2.0))


# ---------------- Count validation ----------------
def _as_counts(values, name: str) -> np.ndarray:
    raw = np.asarray(values)
    # no coercion from text, booleans or objects
    if raw.dtype.kind not in "iuf":
        raise InvalidArgument(f"{name} must be numeric counts, got {raw.dtype}")
    arr = raw.astype(float)
    if not np.isfinite(arr).all():
        raise InvalidArgument(f"{name} must be finite counts (no nulls)")
    if (arr < 0).any():
        raise InvalidArgument(f"{name} must be non-negative, got {arr.min():g}")
    if (arr != np.floor(arr)).any():
        raise InvalidArgument(f"{name} must be whole numbers")
    return arr


def _proportions(positives, negatives):
    pos = _as_counts(positives, "positives")
    neg = _as_counts(negatives, "negatives")
    if pos.shape != neg.shape:
        raise InvalidArgument(f"positives and negatives differ in shape: {pos.shape} vs {neg.shape}")
    n = pos + neg
    empty = n == 0
    safe_n = np.where(empty, 1.0, n)
    return pos / safe_n, safe_n, empty


# ---------------- Wilson bounds ----------------
def _wilson(phat: np.ndarray, n: np.ndarray, z: float, sign: float = -1.0) -> np.ndarray:
    z2 = z * z
    center = phat + z2 / (2.0 * n)
    margin = z * np.sqrt(phat * (1.0 - phat) / n + z2 / (4.0 * n * n))
    return (center + sign * margin) / (1.0 + z2 / n)


def _ranking(phat: np.ndarray, n: np.ndarray, z: float) -> np.ndarray:
    z2 = z * z
    return phat - z * np.sqrt(phat * (1.0 - phat) / n + z2 / (4.0 * n * n))


def lower_bounds(positives, negatives, method: str = "ranking",
                 confidence: float = DEFAULT_CONFIDENCE, z: float | None = None) -> np.ndarray:
    """
    Score arrays of counts. Zero totals score 0.0 and every result is clipped to [0, 1].

    method="wilson" is the Wilson lower bound at `confidence`;
    method="ranking" is p̂ minus the Wilson half-width at RANKING_Z.
    An explicit `z` overrides both defaults.
    """
    if method not in METHODS:
        raise InvalidArgument(f"method must be one of {METHODS}, got {method!r}")
    if z is None:
        z = RANKING_Z if method == "ranking" else z_from_confidence(confidence)

    phat, n, empty = _proportions(positives, negatives)
    if method == "ranking":
        out = _ranking(phat, n, z)
    else:
        out = _wilson(phat, n, z)

    out = np.where(empty, 0.0, out)
    return np.clip(out, 0.0, 1.0)


def score(positives: int, negatives: int, confidence: float = DEFAULT_CONFIDENCE) -> float:
    """Wilson score lower bound for `positives` out of `positives + negatives`."""
    return float(lower_bounds(positives, negatives, method="wilson", confidence=confidence))


def ranking_score(positives: int, negatives: int, z: float = RANKING_Z) -> float:
    """
    Ranking estimate: raw proportion minus the Wilson half-width.
    This is what `wilson_score_interval` returns.
    """
    return float(lower_bounds(positives, negatives, method="ranking", z=z))


def wilson_interval(positives: int, negatives: int,
                    confidence: float = DEFAULT_CONFIDENCE) -> Tuple[float, float]:
    """Two-sided Wilson interval (low, high). No evidence -> (0.0, 1.0)."""
    z = z_from_confidence(confidence)
    phat, n, empty = _proportions(positives, negatives)
    if bool(empty):
        return (0.0, 1.0)
    low = float(np.clip(_wilson(phat, n, z, sign=-1.0), 0.0, 1.0))
    high = float(np.clip(_wilson(phat, n, z, sign=+1.0), 0.0, 1.0))
    return (low, high)
