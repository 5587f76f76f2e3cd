# c2_data.py  (MultiIndex-safe)
# Daily OHLCV loader for the chart walkthrough.
#
# yfinance may hand back single or MultiIndex columns ('Close' or ('Close','AAPL'));
# everything is flattened to Open/High/Low/Close/Volume before being turned
# into a list of Observation records.

from __future__ import annotations
import logging
import os
from typing import List, Optional

import numpy as np
import pandas as pd
import yfinance as yf

from c1_series import Observation, validate_series

logger = logging.getLogger(__name__)

COLUMNS = ["Open", "High", "Low", "Close", "Volume"]

# ---------- helpers -----------------------------------------------------------

def _norm(s) -> str:
    """Normalize a name: lowercased, no spaces."""
    return str(s).strip().lower().replace(" ", "")

def _all_levels_as_names(col) -> set[str]:
    """
    Return a set of normalized names contained in a column identifier.
    Works for both single columns ('Close') and MultiIndex tuples
    (e.g. ('Close','AAPL')).
    """
    if isinstance(col, tuple):
        return {_norm(x) for x in col}
    return {_norm(col)}

def _find_col(df: pd.DataFrame, candidates: set[str]):
    """
    Find the first column in df whose *any* level matches one of 'candidates'
    (case/space-insensitive). Return the original column key.
    """
    for c in df.columns:
        names = _all_levels_as_names(c)
        if names & candidates:
            return c
    return None

def _standardize(df: pd.DataFrame) -> pd.DataFrame:
    """
    Collapse provider columns to COLUMNS. Prefers 'Close', falls back to
    'Adj Close'. Missing open/high/low/volume columns become NaN.
    """
    c_close = _find_col(df, {"close"}) or _find_col(df, {"adjclose", "adj_close"})
    if c_close is None:
        raise KeyError(f"No close column. Available columns: {list(df.columns)}")

    out = pd.DataFrame(index=df.index)
    for name in COLUMNS:
        key = c_close if name == "Close" else _find_col(df, {_norm(name)})
        out[name] = df[key].values if key is not None else np.nan

    if not isinstance(out.index, pd.DatetimeIndex):
        out.index = pd.to_datetime(out.index, errors="coerce")
        out = out[out.index.notna()]
    out.index.name = "Date"

    out = out[~out.index.duplicated(keep="last")].sort_index()
    return out

# ---------- public API --------------------------------------------------------

def cache_path(ticker: str, start: Optional[str], end: Optional[str], cache_dir: str = "data") -> str:
    """One cache file per (ticker, start, end); open bounds are spelled 'min' / 'max'."""
    return os.path.join(cache_dir, f"{ticker}_{start or 'min'}_{end or 'max'}.csv")

def load_ohlcv(
    ticker: str,
    start: Optional[str] = None,
    end: Optional[str] = None,
    cache_dir: str = "data",
    use_cache: bool = False,
) -> pd.DataFrame:
    """
    Daily OHLCV for `ticker` as a DataFrame indexed by Date with columns
    Open/High/Low/Close/Volume.

    use_cache=True keeps the download as <cache_dir>/<ticker>_<start>_<end>.csv
    and reads that file back on the next call for the same range instead of
    hitting the network. Off by default: nothing is written to disk.
    """
    csv_path = cache_path(ticker, start, end, cache_dir)

    if use_cache and os.path.isfile(csv_path):
        logger.info("Reading %s from cache %s", ticker, csv_path)
        df = pd.read_csv(csv_path, parse_dates=["Date"], index_col="Date")
    else:
        logger.info("Downloading %s (%s -> %s)", ticker, start or "start", end or "today")
        df = yf.download(
            ticker,
            start=start,
            end=end,
            auto_adjust=True,
            group_by="column",
            progress=False,
        )
        if df is None or df.empty:
            raise RuntimeError(f"No data returned for {ticker} between {start} and {end}.")
        df = _standardize(df)
        if use_cache:
            os.makedirs(cache_dir, exist_ok=True)
            df.to_csv(csv_path)

    return _standardize(df)

def frame_to_series(df: pd.DataFrame) -> List[Observation]:
    """
    Convert an OHLCV DataFrame (any yfinance column layout) to Observations.
    Rows without a close are dropped; NaN open/high/low/volume become None.
    """
    df = _standardize(df).dropna(subset=["Close"])

    def opt(v, cast=float):
        return None if pd.isna(v) else cast(v)

    return [
        Observation(
            timestamp=ts.date(),
            close=float(row.Close),
            open=opt(row.Open),
            high=opt(row.High),
            low=opt(row.Low),
            volume=opt(row.Volume, int),
        )
        for ts, row in zip(df.index, df.itertuples(index=False))
    ]

def load_series(
    ticker: str,
    start: Optional[str] = None,
    end: Optional[str] = None,
    cache_dir: str = "data",
    use_cache: bool = False,
) -> List[Observation]:
    """load_ohlcv + frame_to_series, checked with validate_series."""
    series = frame_to_series(load_ohlcv(ticker, start, end, cache_dir=cache_dir, use_cache=use_cache))
    validate_series(series)
    logger.info("%s: %d observations (%s -> %s)",
                ticker, len(series), series[0].timestamp, series[-1].timestamp)
    return series
