# pnl_calc.py: month view recalculation, weekly/monthly rollups, comparisons
# and linear trend lines. Everything here is a pure function of
# (raw records, month, year, fee %); nothing is cached or mutated.

import calendar
import logging
from datetime import datetime

import numpy as np
import pandas as pd
from dateutil import tz

log = logging.getLogger(__name__)

MONTHS = list(calendar.month_name)[1:]
DEFAULT_WEEK = "Week 1"
SUM_FIELDS = ["revenue", "profit", "cog", "adspend", "refunds", "disputes", "fees"]
WEEK_COLUMNS = ["week", "days", "revenue", "profit", "profit_pct", "roas",
                "cog", "adspend", "refunds", "disputes", "fees"]


def round_half_away(x):
    """Round half away from zero (2.5 -> 3, -2.5 -> -3). Scalars, arrays or Series."""
    return np.sign(x) * np.floor(np.abs(x) + 0.5)


# ---------- Month view ----------
def filter_period(records, month, year):
    """Restrict to month/year, but only filter on labels the data actually has."""
    out = records
    if month and (records["month"] != "").any():
        out = out[out["month"] == month]
    if year and (records["year"] != "").any():
        out = out[out["year"] == year]
    return out

def month_cog_pct(frame):
    """Month-wide COG share as a fraction; the last positive COG% cell wins."""
    found = frame.loc[frame["cog_pct"] > 0, "cog_pct"]
    if found.empty: return None
    pct = float(found.iloc[-1])
    return pct / 100 if pct > 1 else pct

def _fees(revenue, fee_pct):
    return round_half_away(revenue * fee_pct / 100).where(revenue != 0, 0.0)

def month_view(records, month, year, fee_pct):
    """Per-day records for one month with tips spread, COG%/fees applied and profit recomputed."""
    view = filter_period(records, month, year).reset_index(drop=True)
    if view.empty:
        return view.assign(fees=pd.Series(dtype=float), daily_tips=pd.Series(dtype=float))
    tips = view["tips"]
    daily_tips = float(round_half_away(tips[tips > 0].sum() / len(view)))
    cog_pct = month_cog_pct(view)

    revenue = view["revenue"] + daily_tips
    cog = view["cog"].fillna(0.0) if cog_pct is None else round_half_away(revenue * cog_pct)
    fees = _fees(revenue, fee_pct)
    profit = revenue - cog - view["adspend"].fillna(0.0) - fees - view["refunds"].fillna(0.0)
    profit_pct = round_half_away(profit / revenue.where(revenue != 0) * 100).fillna(0.0)
    return view.assign(revenue=revenue, cog=cog, fees=fees, profit=profit,
                       profit_pct=profit_pct, daily_tips=daily_tips)


# ---------- Rollups ----------
def _share(part, whole):
    return float(round_half_away(part / whole * 100)) if whole else 0.0

def summarize(frame):
    out = {c: float(frame[c].sum()) if c in frame else 0.0 for c in SUM_FIELDS}
    out["profit_pct"] = _share(out["profit"], out["revenue"])
    roas = frame["roas"].dropna()
    out["roas"] = float(roas.mean()) if len(roas) else None
    out["days"] = len(frame)
    return out

def week_groups(view):
    """(week label, day rows) pairs in first-seen order; blank labels join Week 1."""
    if view.empty: return []
    labels = view["week"].replace("", DEFAULT_WEEK)
    return [(name, days) for name, days in view.groupby(labels, sort=False)]

def weekly_summary(view):
    rows = [dict(week=name, **summarize(days)) for name, days in week_groups(view)]
    return pd.DataFrame(rows, columns=WEEK_COLUMNS)

def month_totals(view):
    out = summarize(view)
    for k in ("cog", "adspend", "refunds"):
        out[f"{k}_pct"] = _share(out[k], out["revenue"])
    return out


# ---------- Previous period ----------
def period_keys(records):
    """Distinct (month, year) pairs in first-seen order; year is "" when the data has none."""
    if not (records["month"] != "").any(): return []
    keys = records.loc[records["month"] != "", ["month", "year"]]
    if not (records["year"] != "").any():
        keys = keys.assign(year="")
    return list(keys.drop_duplicates().itertuples(index=False, name=None))

def previous_period(records, month, year):
    keys = period_keys(records)
    has_year = any(y for _, y in keys)
    current = (month, year if has_year else "")
    if current not in keys: return None
    idx = keys.index(current)
    return keys[idx - 1] if idx > 0 else None

def previous_totals(records, month, year, fee_pct):
    """Totals of the period before month/year: raw rows, only fees recomputed."""
    prev = previous_period(records, month, year)
    if prev is None: return None
    rows = filter_period(records, *prev)
    if rows.empty: return None
    log.debug("comparing against %s %s (%d days)", prev[0], prev[1], len(rows))
    return month_totals(rows.assign(fees=_fees(rows["revenue"], fee_pct)))


# ---------- Comparisons & trend ----------
def pct_change(current, previous):
    if current is None or previous is None or pd.isna(current) or pd.isna(previous) or previous == 0:
        return None
    return float((current - previous) / abs(previous) * 100.0)

def wow(current, previous, invert=False):
    """(change %, favorable?) or (None, None); `invert` when lower is better."""
    pct = pct_change(current, previous)
    if pct is None: return None, None
    return pct, (pct <= 0 if invert else pct >= 0)

def linear_trend(values):
    """OLS fit over index 0..n-1, rounded to int; all None below 2 points."""
    y = np.array([0.0 if v is None or pd.isna(v) else float(v) for v in values])
    n = len(y)
    if n < 2: return [None] * n
    x = np.arange(n, dtype=float)
    sx, sy, sxy, sx2 = x.sum(), y.sum(), (x * y).sum(), (x * x).sum()
    m = (n * sxy - sx * sy) / (n * sx2 - sx * sx)
    b = (sy - m * sx) / n
    return [int(v) for v in round_half_away(m * x + b)]


# ---------- Period options ----------
def local_today():
    return datetime.now(tz.tzlocal()).date()

def distinct_labels(records, col):
    return [v for v in records[col].drop_duplicates() if v]

def month_options(records):
    return distinct_labels(records, "month") or list(MONTHS)

def year_options(records, today=None):
    years = distinct_labels(records, "year")
    if years: return years
    today = today or local_today()
    return [str(today.year + d) for d in (-1, 0, 1)]

def default_period(records, today=None):
    """Today's month/year if the data has it, else the latest period seen."""
    today = today or local_today()
    current = (MONTHS[today.month - 1], str(today.year))
    keys = period_keys(records)
    if not keys: return current
    if not any(y for _, y in keys):
        months = [m for m, _ in keys]
        return (current[0] if current[0] in months else months[-1], current[1])
    return current if current in keys else keys[-1]
