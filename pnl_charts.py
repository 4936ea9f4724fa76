# pnl_charts.py: formatting, plotly figures and the weekly P&L table.

import pandas as pd
import plotly.graph_objects as go

from pnl_calc import linear_trend, round_half_away, week_groups, wow

DASH = "—"
REV_BLUE, PROFIT_GREEN, ROAS_RED = "#4A7AB5", "#6BAF6B", "#D06050"
TREND_BLUE, TREND_GREEN = "rgba(74,122,181,0.35)", "rgba(107,175,107,0.35)"
TABLE_COLUMNS = ["", "Rev", "Profit", "P%", "ROAS", "COG", "Ads", "Ref", "#"]


# ---------- Formatting ----------
def _missing(v):
    return v is None or pd.isna(v)

def fmt_cur(v, sym="$"):
    if _missing(v): return DASH
    v = round_half_away(v)
    return sym + (f"{v:,.0f}" if abs(v) >= 1000 else f"{v:.0f}")

def fmt_pct(v):
    return DASH if _missing(v) else f"{round_half_away(v):.0f}%"

def fmt_roas(v):
    return DASH if _missing(v) or not v else f"{v:.1f}"

def fmt_change(pct):
    if pct is None: return ""
    return f"{'+' if pct >= 0 else ''}{round_half_away(pct):.0f}%"


# ---------- Figures ----------
def with_trends(view):
    return view.assign(rev_trend=linear_trend(view["revenue"]),
                       profit_trend=linear_trend(view["profit"]))

def revenue_profit_fig(view, title="Revenue / Profit", currency="$"):
    """Daily revenue (left axis) and profit (right axis) with dashed OLS trends."""
    d = with_trends(view)
    fig = go.Figure()
    fig.add_trace(go.Scatter(x=d["day"], y=d["rev_trend"], name="Revenue Trend", mode="lines",
                             line=dict(color=TREND_BLUE, dash="dash", width=1.5)))
    fig.add_trace(go.Scatter(x=d["day"], y=d["profit_trend"], name="Profit Trend", mode="lines", yaxis="y2",
                             line=dict(color=TREND_GREEN, dash="dash", width=1.5)))
    fig.add_trace(go.Scatter(x=d["day"], y=d["revenue"], name="Revenue", mode="lines+markers",
                             line=dict(color=REV_BLUE, width=2)))
    fig.add_trace(go.Scatter(x=d["day"], y=d["profit"], name="Profit", mode="lines+markers", yaxis="y2",
                             line=dict(color=PROFIT_GREEN, width=2)))
    fig.update_layout(title=title, xaxis_title="Day", hovermode="x unified",
                      yaxis=dict(title=f"Revenue ({currency})"),
                      yaxis2=dict(title=f"Profit ({currency})", overlaying="y", side="right"))
    return fig

def roas_fig(view, avg_roas=None, title="ROAS"):
    fig = go.Figure()
    fig.add_trace(go.Scatter(x=view["day"], y=view["roas"], name="ROAS", mode="lines+markers",
                             connectgaps=True, line=dict(color=ROAS_RED, width=2)))
    if not _missing(avg_roas):
        fig.add_hline(y=avg_roas, line_dash="dot", line_color="#9ca3af",
                      annotation_text=f"avg {avg_roas:.1f}")
    fig.update_layout(title=title, xaxis_title="Day", yaxis_title="ROAS", hovermode="x unified")
    return fig


# ---------- Weekly table ----------
def _day_label(v):
    return DASH if _missing(v) else (f"{v:.0f}" if float(v).is_integer() else f"{v:g}")

def weekly_table(view, weeks, currency="$"):
    """Day rows, a total row per week and a WoW row against the week before."""
    fc = lambda v: fmt_cur(v, currency)
    rows, prev = [], None
    summaries = weeks.set_index("week").to_dict("index") if not weeks.empty else {}
    for name, days in week_groups(view):
        rows.append([name] + [""] * 8)
        for _, d in days.iterrows():
            rows.append([_day_label(d["day"]), fc(d["revenue"]), fc(d["profit"]),
                         DASH if _missing(d["profit_pct"]) else f"{d['profit_pct']:.0f}",
                         fmt_roas(d["roas"]), fc(d["cog"]), fc(d["adspend"]), fc(d["refunds"]),
                         DASH if _missing(d["disputes"]) else f"{d['disputes']:.0f}"])
        w = summaries[name]
        rows.append(["Total", fc(w["revenue"]), fc(w["profit"]), f"{w['profit_pct']:.0f}%",
                     fmt_roas(w["roas"]), "", "", "", ""])
        if prev is not None:
            rows.append(["WoW"] + [fmt_change(wow(w[k], prev[k])[0])
                                   for k in ("revenue", "profit", "profit_pct", "roas")] + [""] * 4)
        prev = w
    return pd.DataFrame(rows, columns=TABLE_COLUMNS)
