# c1_series.py
# Data model shared by the loader, the transforms and the charts:
#  - Observation: one trading day (close always present)
#  - Candle: one OHLC bar per bucket
#  - bucket functions (month / year / week) and their "first day of period" dates
#  - error taxonomy raised by the transforms

from __future__ import annotations
import math
import numbers
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Hashable, Optional, Sequence

import numpy as np
import pandas as pd

# Explicit missing-value marker for derived numeric columns (never None).
NA = float("nan")

def is_na(x) -> bool:
    """True for None and NaN."""
    if x is None:
        return True
    try:
        return math.isnan(x)
    except TypeError:
        return False

# --------------------------------------------------------------------------- #
# Errors                                                                       #
# --------------------------------------------------------------------------- #

class SeriesError(Exception):
    """Base class for malformed-input failures in the series transforms."""

class EmptyInputError(SeriesError, ValueError):
    pass

class IndexOutOfRange(SeriesError, IndexError):
    pass

class DivisionByZeroError(SeriesError, ZeroDivisionError):
    pass

class InvalidBucketFunction(SeriesError, ValueError):
    pass

class EmptyBucketError(SeriesError, ValueError):
    pass

class UnorderedSeriesError(SeriesError, ValueError):
    pass

class MissingCloseError(SeriesError, ValueError):
    pass

# --------------------------------------------------------------------------- #
# Records                                                                      #
# --------------------------------------------------------------------------- #

@dataclass(frozen=True)
class Observation:
    """One daily bar. Only `close` is guaranteed; the rest depend on the provider."""

    timestamp: date
    close: float
    open: Optional[float] = None
    high: Optional[float] = None
    low: Optional[float] = None
    volume: Optional[int] = None

@dataclass(frozen=True)
class Candle:
    date: date
    open: float
    high: float
    low: float
    close: float

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
        }

def validate_series(series: Sequence[Observation]) -> None:
    """
    Check the shape every transform assumes:
      - non-empty
      - strictly increasing timestamps (no duplicates)
      - close populated on every row
    """
    if not series:
        raise EmptyInputError("Series is empty.")
    prev = None
    for i, obs in enumerate(series):
        if is_na(obs.close):
            raise MissingCloseError(f"Missing close at position {i} ({obs.timestamp}).")
        if prev is not None and obs.timestamp <= prev:
            raise UnorderedSeriesError(
                f"Timestamps must be strictly increasing: {obs.timestamp} follows {prev} "
                f"at position {i}."
            )
        prev = obs.timestamp

# --------------------------------------------------------------------------- #
# Buckets                                                                      #
# --------------------------------------------------------------------------- #

def month_bucket(obs: Observation) -> tuple:
    return (obs.timestamp.year, obs.timestamp.month)

def year_bucket(obs: Observation) -> tuple:
    return (obs.timestamp.year,)

def week_bucket(obs: Observation) -> date:
    """Monday of the ISO week containing the observation."""
    d = _as_date(obs.timestamp)
    return d - timedelta(days=d.weekday())

def _as_date(value) -> date:
    # datetime (and pd.Timestamp) are date subclasses
    if isinstance(value, datetime):
        return value.date()
    return value

def bucket_start(key: Hashable) -> date:
    """
    Map a bucket key back to the first day of its period.
    Accepts a date-like key (returned as a date) or an int tuple
    (year,) / (year, month) / (year, month, day); month and day default to 1.
    """
    if isinstance(key, date):
        return _as_date(key)
    if isinstance(key, pd.Period):
        return key.start_time.date()
    if isinstance(key, tuple) and 1 <= len(key) <= 3 and all(
        isinstance(p, numbers.Integral) and not isinstance(p, (bool, np.bool_)) for p in key
    ):
        # numbers.Integral also admits numpy integers
        parts = [int(p) for p in key] + [1] * (3 - len(key))
        try:
            return date(*parts)
        except ValueError as e:
            raise InvalidBucketFunction(f"Bucket key {key!r} is not a valid date: {e}") from e
    raise InvalidBucketFunction(
        f"Bucket key {key!r} ({type(key).__name__}) cannot be mapped to a date. "
        "Return a date or a (year[, month[, day]]) tuple."
    )
