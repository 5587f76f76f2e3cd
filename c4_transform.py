# c4_transform.py
# Series transforms feeding the charts:
#  - aggregate          : group observations into calendar buckets and reduce each bucket
#  - monthly_volume     : sum of volume per month (dual-axis chart)
#  - percent_change     : close rescaled to % change vs. a baseline day
#  - partition_gain_loss: split closes into gain / loss series around a break-even price
#  - build_candles      : OHLC per bucket from the close prices
#
# Every function returns new lists; inputs are never modified.

from __future__ import annotations
import logging
from typing import Callable, Dict, Hashable, Iterable, List, Optional, Sequence, Tuple, TypeVar

from c1_series import (
    NA, Candle, Observation, is_na, bucket_start, month_bucket,
    EmptyInputError, IndexOutOfRange, DivisionByZeroError, EmptyBucketError,
    InvalidBucketFunction,
)

logger = logging.getLogger(__name__)

R = TypeVar("R")
BucketFn = Callable[[Observation], Hashable]

# --------------------------------------------------------------------------- #
# Aggregator                                                                   #
# --------------------------------------------------------------------------- #

def aggregate(
    series: Sequence[Observation],
    bucket_fn: BucketFn,
    reduce_fn: Callable[[List[Observation]], R],
    keys: Optional[Iterable[Hashable]] = None,
) -> List[Tuple[object, R]]:
    """
    Group observations by bucket_fn and reduce each group.

    - buckets come out in the order their key first appears (chronological for
      sorted input); reduce_fn receives the whole group, in input order
    - each bucket is labelled with the first day of its period (bucket_start)
    - keys: optional externally supplied bucket keys. Output follows their order,
      observations outside them are ignored, and a key with no observation
      raises EmptyBucketError.
    """
    if not series:
        raise EmptyInputError("Cannot aggregate an empty series.")

    groups: Dict[Hashable, List[Observation]] = {}
    for obs in series:
        key = bucket_fn(obs)
        try:
            groups.setdefault(key, []).append(obs)
        except TypeError as e:
            raise InvalidBucketFunction(
                f"Bucket key {key!r} ({type(key).__name__}) is not hashable."
            ) from e

    order = list(groups) if keys is None else list(keys)
    # Resolve every date before reducing anything: no partial output on a bad key.
    starts = [bucket_start(k) for k in order]

    out = []
    for key, start in zip(order, starts):
        members = groups.get(key)
        if not members:
            raise EmptyBucketError(f"Bucket {key!r} has no observations.")
        out.append((start, reduce_fn(members)))

    logger.debug("aggregate: %d observations -> %d buckets", len(series), len(out))
    return out

def monthly_volume(series: Sequence[Observation]) -> List[Tuple[object, int]]:
    """Total traded volume per calendar month (missing volume counts as 0)."""
    return aggregate(
        series,
        month_bucket,
        lambda rows: int(sum(o.volume for o in rows if o.volume is not None)),
    )

# --------------------------------------------------------------------------- #
# Normalizer                                                                   #
# --------------------------------------------------------------------------- #

def percent_change(series: Sequence[Observation], baseline_index: int = 0) -> List[Observation]:
    """
    close_i -> (close_i / close_k - 1) * 100 with k = baseline_index.
    Negative indices count from the end, as with a list. Open/high/low are
    dropped (they would still be prices); volume is kept.
    """
    if not series:
        raise EmptyInputError("Cannot normalize an empty series.")
    n = len(series)
    if not -n <= baseline_index < n:
        raise IndexOutOfRange(f"baseline_index {baseline_index} out of range for {n} observations.")

    base = series[baseline_index].close
    if base == 0:
        raise DivisionByZeroError(
            f"Baseline close is 0 at index {baseline_index} ({series[baseline_index].timestamp})."
        )

    return [
        Observation(timestamp=o.timestamp, close=(o.close / base - 1) * 100, volume=o.volume)
        for o in series
    ]

# --------------------------------------------------------------------------- #
# Partitioner                                                                  #
# --------------------------------------------------------------------------- #

def partition_gain_loss(
    series: Sequence[Observation],
    breakeven: Optional[float] = None,
) -> Tuple[List[Observation], List[Observation]]:
    """
    Split the closes into a gain series (close >= breakeven) and a loss series
    (close < breakeven); the other side gets NA. breakeven defaults to the first close.

    Crossings are then stitched in one forward pass so the two filled regions
    meet instead of leaving a gap:
      gain[i] is NA and loss[i-1] is NA  ->  gain[i] = loss[i]
      loss[i] is NA and gain[i-1] is NA  ->  loss[i] = gain[i]
    The lookback reads values already stitched at i-1. Index 0 is never stitched.
    """
    if not series:
        raise EmptyInputError("Cannot partition an empty series.")
    if breakeven is None:
        breakeven = series[0].close

    gain = [o.close if o.close >= breakeven else NA for o in series]
    loss = [NA if o.close >= breakeven else o.close for o in series]

    prev_gain, prev_loss = gain[0], loss[0]
    for i in range(1, len(series)):
        if is_na(gain[i]) and is_na(prev_loss):
            gain[i] = loss[i]
        if is_na(loss[i]) and is_na(prev_gain):
            loss[i] = gain[i]
        prev_gain, prev_loss = gain[i], loss[i]

    ts = [o.timestamp for o in series]
    return (
        [Observation(timestamp=t, close=v) for t, v in zip(ts, gain)],
        [Observation(timestamp=t, close=v) for t, v in zip(ts, loss)],
    )

# --------------------------------------------------------------------------- #
# Candle builder                                                               #
# --------------------------------------------------------------------------- #

def _ohlc(rows: List[Observation]) -> Tuple[float, float, float, float]:
    closes = [o.close for o in rows]
    return closes[0], max(closes), min(closes), closes[-1]

def build_candles(
    series: Sequence[Observation],
    bucket_fn: BucketFn = month_bucket,
    keys: Optional[Iterable[Hashable]] = None,
) -> List[Candle]:
    """
    OHLC of the close price per bucket (monthly by default):
    open = first close, high = max, low = min, close = last close.
    Input must be sorted by timestamp for open/close to mean anything; this is
    not checked.
    """
    return [
        Candle(date=start, open=o, high=h, low=l, close=c)
        for start, (o, h, l, c) in aggregate(series, bucket_fn, _ohlc, keys=keys)
    ]
