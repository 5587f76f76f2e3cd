# c3_viz.py
# The six walkthrough charts. Inputs are the plain records produced by
# c2_data / c4_transform (Observations, (date, value) tuples, Candles);
# pandas frames are only built here, right before handing data to the
# plotting library.
from __future__ import annotations
import logging
import warnings
from typing import Iterable, Optional, Sequence, Tuple

import pandas as pd
import matplotlib.pyplot as plt
import mplfinance as mpf
import plotly.graph_objects as go

from c1_series import NA, Candle, Observation, is_na

warnings.filterwarnings("ignore", category=FutureWarning)

logger = logging.getLogger(__name__)

COLORS = {
    "price": "#3B82F6",
    "volume": "#9CA3AF",
    "gain": "#10B981",
    "loss": "#EF4444",
    "ref": "#6B7280",
}

# ---------- helpers -----------------------------------------------------------

def _series_frame(series: Sequence[Observation]) -> pd.DataFrame:
    """Observations -> DataFrame indexed by Date (missing fields as NaN)."""
    def col(field):
        return [NA if is_na(getattr(o, field)) else float(getattr(o, field)) for o in series]

    return pd.DataFrame(
        {name: col(name.lower()) for name in ("Open", "High", "Low", "Close", "Volume")},
        index=pd.DatetimeIndex([pd.Timestamp(o.timestamp) for o in series], name="Date"),
        dtype="float64",
    )

def _pairs_frame(pairs: Sequence[Tuple[object, float]], name: str) -> pd.Series:
    return pd.Series(
        [v for _, v in pairs],
        index=pd.DatetimeIndex([pd.Timestamp(d) for d, _ in pairs], name="Date"),
        name=name,
        dtype="float64",
    )

def _candles_frame(candles: Sequence[Candle]) -> pd.DataFrame:
    df = pd.DataFrame([c.to_dict() for c in candles])
    df.index = pd.DatetimeIndex(pd.to_datetime(df.pop("date")), name="Date")
    df.columns = ["Open", "High", "Low", "Close"]
    return df

def _finish(fig, title: str, savepath: Optional[str], show: bool) -> None:
    fig.suptitle(title)
    fig.autofmt_xdate()
    fig.tight_layout()
    if savepath:
        fig.savefig(savepath, dpi=150, bbox_inches="tight")
        logger.info("Saved chart %s", savepath)
    if show:
        plt.show()
    else:
        plt.close(fig)

# ---------- public API --------------------------------------------------------

def plot_line(
    series: Sequence[Observation],
    title: Optional[str] = None,
    savepath: Optional[str] = None,
    show: bool = True,
) -> None:
    """Basic close-price line chart."""
    df = _series_frame(series)
    fig, ax = plt.subplots(figsize=(12, 5))
    ax.plot(df.index, df["Close"], color=COLORS["price"], linewidth=1.5)
    ax.set_ylabel("Close")
    ax.grid(True, alpha=0.3)
    _finish(fig, title or "Close price", savepath, show)

def plot_price_volume(
    series: Sequence[Observation],
    volume: Sequence[Tuple[object, int]],
    title: Optional[str] = None,
    savepath: Optional[str] = None,
    show: bool = True,
) -> None:
    """
    Dual-axis chart: daily close as a line (left axis) and the aggregated
    volume (e.g. monthly_volume) as bars on a second y axis.
    """
    df = _series_frame(series)
    vol = _pairs_frame(volume, "Volume")

    fig, ax_price = plt.subplots(figsize=(12, 5))
    ax_vol = ax_price.twinx()
    # bars drawn first and behind the price line
    ax_vol.bar(vol.index, vol.values, width=20, align="edge",
               color=COLORS["volume"], alpha=0.4, label="Volume")
    ax_price.plot(df.index, df["Close"], color=COLORS["price"], linewidth=1.5, label="Close")
    ax_price.set_zorder(ax_vol.get_zorder() + 1)
    ax_price.patch.set_visible(False)

    ax_price.set_ylabel("Close")
    ax_vol.set_ylabel("Volume")
    ax_price.grid(True, alpha=0.3)
    _finish(fig, title or "Close price and volume", savepath, show)

def plot_interactive(
    series: Sequence[Observation],
    columns: Iterable[str] = ("Open", "High", "Low", "Close"),
    title: Optional[str] = None,
    savepath: Optional[str] = None,
    show: bool = True,
) -> go.Figure:
    """
    Interactive multi-series chart (one line per price column, range slider).
    Written as standalone HTML when savepath is given. Returns the figure.
    """
    df = _series_frame(series)
    fig = go.Figure()
    for col in columns:
        if df[col].notna().any():
            fig.add_trace(go.Scatter(x=df.index, y=df[col], mode="lines", name=col))
    fig.update_layout(
        title=title or "Price history",
        xaxis_rangeslider_visible=True,
        hovermode="x unified",
    )
    if savepath:
        fig.write_html(savepath)
        logger.info("Saved chart %s", savepath)
    if show:
        fig.show()
    return fig

def plot_percent_change(
    pct_series: Sequence[Observation],
    title: Optional[str] = None,
    savepath: Optional[str] = None,
    show: bool = True,
) -> None:
    """Percent change vs. the baseline day, with a 0% reference line."""
    df = _series_frame(pct_series)
    fig, ax = plt.subplots(figsize=(12, 5))
    ax.plot(df.index, df["Close"], color=COLORS["price"], linewidth=1.5)
    ax.axhline(0, color=COLORS["ref"], linestyle="--", linewidth=1)
    ax.set_ylabel("Change (%)")
    ax.grid(True, alpha=0.3)
    _finish(fig, title or "Percent change", savepath, show)

def plot_gain_loss(
    gain: Sequence[Observation],
    loss: Sequence[Observation],
    breakeven: float,
    title: Optional[str] = None,
    savepath: Optional[str] = None,
    show: bool = True,
) -> None:
    """
    Gain/loss chart: the stitched series from partition_gain_loss drawn as
    green/red areas against the break-even price. NaN points leave gaps.
    """
    gain_s = _series_frame(gain)["Close"]
    loss_s = _series_frame(loss)["Close"]

    fig, ax = plt.subplots(figsize=(12, 5))
    ax.fill_between(gain_s.index, breakeven, gain_s.values, color=COLORS["gain"], alpha=0.35, label="Gain")
    ax.fill_between(loss_s.index, breakeven, loss_s.values, color=COLORS["loss"], alpha=0.35, label="Loss")
    ax.plot(gain_s.index, gain_s.values, color=COLORS["gain"], linewidth=1)
    ax.plot(loss_s.index, loss_s.values, color=COLORS["loss"], linewidth=1)
    ax.axhline(breakeven, color=COLORS["ref"], linestyle="--", linewidth=1, label="Break-even")
    ax.set_ylabel("Close")
    ax.legend(loc="upper left", framealpha=0.9)
    ax.grid(True, alpha=0.3)
    _finish(fig, title or f"Gain / loss vs. {breakeven:.2f}", savepath, show)

def plot_candlestick(
    candles: Sequence[Candle],
    mav: Optional[Iterable[int]] = None,
    title: Optional[str] = None,
    savepath: Optional[str] = None,
    show: bool = True,
) -> None:
    """
    Candlestick chart of pre-built candles (e.g. build_candles(series)).
    - mav: moving averages (tuple) or None
    """
    ohlc = _candles_frame(candles)
    mav = tuple(mav) if mav else ()

    kwargs = dict(
        type="candle",
        style="yahoo",
        title=title or "",
        volume=False,
        show_nontrading=True,  # monthly bars are spaced by calendar
        tight_layout=True,
    )
    if mav:
        kwargs["mav"] = mav

    if savepath:
        mpf.plot(ohlc, **kwargs, savefig=savepath)
        logger.info("Saved chart %s", savepath)
    else:
        mpf.plot(ohlc, **kwargs)

    if not show:
        plt.close("all")
