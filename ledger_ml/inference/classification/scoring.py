"""Similarity primitives shared by the classification stages.

Pure functions, no I/O. Scores are floats in [0, 1]; stages turn them into
0-100 confidences.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime, timezone
from decimal import Decimal

from ledger_ml.config.patterns import AMOUNT_BUCKETS, XLARGE_BUCKET

Number = float | int | Decimal

# pg_trgm treats every non-alphanumeric character as a word separator
_TRGM_WORD = re.compile(r"[^\W_]+")

NEAR_ZERO_AMOUNT = 1.0
NEAR_ZERO_PROXIMITY = 0.5
LOG_DISTANCE_SCALE = 3.0

ENTITY_AMOUNT_TOLERANCE = 0.15
ENTITY_NEAR_ZERO_SIMILARITY = 0.7


def _trigrams(text: str) -> set[str]:
    grams: set[str] = set()
    for word in _TRGM_WORD.findall(text.lower()):
        padded = f"  {word} "
        grams.update(padded[i : i + 3] for i in range(len(padded) - 2))
    return grams


def trigram_similarity(left: str, right: str) -> float:
    """Trigram similarity with pg_trgm's `similarity()` semantics."""
    a = _trigrams(left)
    b = _trigrams(right)
    if not a or not b:
        return 0.0
    return len(a & b) / len(a | b)


def amount_proximity(first: Number, second: Number) -> float:
    """Log-scale closeness of two amounts; sign is ignored.

    Amounts below 1 in absolute value get flat partial credit instead of
    going through the logarithm.
    """
    a = abs(float(first))
    b = abs(float(second))
    if a < NEAR_ZERO_AMOUNT or b < NEAR_ZERO_AMOUNT:
        return NEAR_ZERO_PROXIMITY
    distance = abs(math.log(a) - math.log(b))
    return 1.0 - min(1.0, distance / LOG_DISTANCE_SCALE)


def entity_amount_similarity(historical: Number, amount: Number) -> float:
    """Amount agreement used by the entity matcher (+/-15% band)."""
    h = float(historical)
    a = float(amount)
    diff = abs(h - a)
    if diff <= abs(a * ENTITY_AMOUNT_TOLERANCE):
        return 1.0
    if abs(h) < NEAR_ZERO_AMOUNT or abs(a) < NEAR_ZERO_AMOUNT:
        return ENTITY_NEAR_ZERO_SIMILARITY
    return max(0.0, 1.0 - diff / max(abs(h), abs(a)))


def _as_datetime(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)


def recency_score(
    moment: date | datetime,
    now: datetime,
    horizon_days: int = 180,
) -> float:
    """Linear decay from 1 (now) to 0 at `horizon_days` of age."""
    age_days = (_as_datetime(now) - _as_datetime(moment)).total_seconds() / 86400.0
    return 1.0 - min(1.0, max(0.0, age_days) / horizon_days)


def months_between(earlier: date | datetime, later: date | datetime) -> int:
    """Calendar month difference, never negative."""
    months = (later.year - earlier.year) * 12 + (later.month - earlier.month)
    return max(0, months)


def monthly_recency_score(
    moment: date | datetime,
    now: datetime,
    horizon_months: int = 12,
) -> float:
    """Linear decay to 0 at `horizon_months` calendar months."""
    return max(0.0, 1.0 - months_between(moment, now) / horizon_months)


def frequency_score(count: int, saturation: int) -> float:
    return min(1.0, count / saturation)


def amount_bucket(amount: Number) -> tuple[str, str]:
    """Coarse (bucket, label) pair for an amount, e.g. ("small", "10-50€")."""
    value = abs(float(amount))
    for upper, bucket, label in AMOUNT_BUCKETS:
        if value <= upper:
            return bucket, label
    return XLARGE_BUCKET


def build_embedding_text(description: str, amount: Number) -> str:
    """Text sent to the embedding service for a transaction."""
    bucket, label = amount_bucket(amount)
    return f"{description} | Importo: {bucket} ({label})"


def to_confidence(score: float, cap: int = 100) -> int:
    """Turn a [0, 1] score into an integer confidence in [0, cap]."""
    return max(0, min(cap, round(score * 100)))
