# pnl_demo.py: deterministic demo month, shown when the live sheet is unavailable.

import numpy as np
import pandas as pd

from pnl_calc import round_half_away
from pnl_parse import RECORD_COLUMNS

DEMO_COG_PCT = 24.5
DEMO_FEE_PCT = 8.5


def demo_records(n_weeks=5, seed=42):
    """January 2026, seven days a week and three in the last week."""
    rng = np.random.default_rng(seed)
    week_of = np.concatenate([[w] * (3 if w == n_weeks else 7) for w in range(1, n_weeks + 1)])
    n = len(week_of)
    rev = round_half_away(4000 + rng.random(n) * 9000)
    adspend = round_half_away(1500 + rng.random(n) * 3000)
    cog = round_half_away(rev * (DEMO_COG_PCT / 100))
    fees = round_half_away(rev * DEMO_FEE_PCT / 100)
    refunds = round_half_away(rng.random(n) * 200)
    profit = rev - adspend - cog - fees - refunds
    df = pd.DataFrame({
        "day": np.arange(1, n + 1, dtype=float),
        "revenue": rev, "profit": profit,
        "profit_pct": round_half_away(profit / rev * 100),
        "roas": np.round(rev / adspend, 1),
        "cog": cog, "cog_pct": DEMO_COG_PCT,
        "adspend": adspend, "refunds": refunds,
        "disputes": np.floor(rng.random(n) * 3),
        "tips": 0.0,
        "week": [f"Week {w}" for w in week_of],
        "month": "January", "year": "2026",
    })
    return df[RECORD_COLUMNS]
