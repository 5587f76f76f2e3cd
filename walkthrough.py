# walkthrough.py
# Daily price/volume for one ticker rendered through six charts:
#   1) close line  2) close + monthly volume  3) interactive OHLC lines
#   4) % change    5) gain / loss vs. break-even  6) monthly candlesticks
#
# How to run:
#     python walkthrough.py
# Charts are written to ./outputs

from __future__ import annotations
import logging
import os

import c3_viz as viz
from c2_data import load_series
from c4_transform import build_candles, monthly_volume, partition_gain_loss, percent_change

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# --------------------------- config ----------------------------------------- #
TICKER    = "AAPL"
START     = "2023-01-01"
END       = "2024-12-31"
BASELINE  = 0       # index of the day the % change is measured from
BREAKEVEN = None    # None -> first close of the period
CACHE_DIR = "data"
USE_CACHE = True    # keep the download under CACHE_DIR for repeat runs
SHOW      = False   # True opens each chart interactively

OUTDIR = os.path.join(os.getcwd(), "outputs")
# ---------------------------------------------------------------------------- #

def main():
    os.makedirs(OUTDIR, exist_ok=True)

    # 1) Data
    series = load_series(TICKER, start=START, end=END, cache_dir=CACHE_DIR, use_cache=USE_CACHE)

    # 2) Derived series
    volume = monthly_volume(series)
    pct = percent_change(series, baseline_index=BASELINE)
    breakeven = series[0].close if BREAKEVEN is None else BREAKEVEN
    gain, loss = partition_gain_loss(series, breakeven=breakeven)
    candles = build_candles(series)
    logger.info("Derived %d monthly volumes, %d candles, break-even %.2f",
                len(volume), len(candles), breakeven)

    # 3) Charts
    def out(name): return os.path.join(OUTDIR, f"{TICKER}_{name}")

    viz.plot_line(series, title=f"{TICKER} — Close", savepath=out("line.png"), show=SHOW)
    viz.plot_price_volume(series, volume, title=f"{TICKER} — Close & monthly volume",
                          savepath=out("price_volume.png"), show=SHOW)
    viz.plot_interactive(series, title=f"{TICKER} — OHLC", savepath=out("interactive.html"), show=SHOW)
    viz.plot_percent_change(pct, title=f"{TICKER} — % change since {series[BASELINE].timestamp}",
                            savepath=out("percent_change.png"), show=SHOW)
    viz.plot_gain_loss(gain, loss, breakeven, title=f"{TICKER} — Gain / loss vs. {breakeven:.2f}",
                       savepath=out("gain_loss.png"), show=SHOW)
    viz.plot_candlestick(candles, title=f"{TICKER} — Monthly", savepath=out("candles_monthly.png"),
                         show=SHOW)

    print(f"Observations : {len(series)} ({series[0].timestamp} -> {series[-1].timestamp})")
    print(f"Months       : {len(candles)}")
    print(f"Last % change: {pct[-1].close:+.2f}%")
    logger.info("Charts saved in %s", OUTDIR)

if __name__ == "__main__":
    main()
