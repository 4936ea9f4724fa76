# app.py: Store P&L • Revenue / Profit dashboard
# Reads the published data + config sheets, recalculates the selected month
# under the chosen fee %, and shows KPIs (MoM), daily charts with trend lines,
# the weekly table (WoW) and CSV/PDF exports.

import logging
import os

import streamlit as st

from pnl_calc import (default_period, month_options, month_totals, month_view,
                      previous_totals, weekly_summary, wow, year_options)
from pnl_charts import fmt_change, fmt_cur, fmt_roas, revenue_profit_fig, roas_fig, weekly_table
from pnl_export import pdf_from_text, summary_lines, view_csv, weekly_csv
from pnl_feeds import load_dashboard

logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s %(name)s: %(message)s")
log = logging.getLogger("pnl.app")

DATA_CSV_URL = os.getenv("PNL_DATA_CSV_URL", "")
CONFIG_CSV_URL = os.getenv("PNL_CONFIG_CSV_URL", "")
CACHE_TTL = int(os.getenv("PNL_CACHE_TTL", "300"))
FEE_MIN, FEE_MAX, FEE_STEP = 0.0, 30.0, 0.5

# ---------- Page config & style ----------
st.set_page_config(page_title="P&L • Revenue / Profit", layout="wide")
st.markdown("""
    <style>
    .small-note { color:#6b7280; font-size:12px; }
    .kpi-card { padding:12px; border:1px solid #e5e7eb; border-radius:8px; background:#fff; }
    .ok   { color:#059669; } .down { color:#dc2626; } .flat { color:#6b7280; }
    .badge-live { color:#059669; font-size:12px; } .badge-demo { color:#d97706; font-size:12px; }
    </style>
""", unsafe_allow_html=True)

@st.cache_data(ttl=CACHE_TTL, show_spinner="Loading data...")
def cached_load(data_url, config_url):
    return load_dashboard(data_url, config_url)

def kpi(label, value, sub, curr, prev, invert=False):
    pct, good = wow(curr, prev, invert)
    css = "flat" if pct is None else ("ok" if good else "down")
    delta = "" if pct is None else f"{fmt_change(pct)} MoM"
    st.markdown(f"""<div class="kpi-card"><div style="font-size:12px;color:#6b7280">{label}</div>
    <div style="font-size:22px;font-weight:700">{value}</div>
    <div style="font-size:12px"><span style="color:#6b7280">{sub}</span> <span class="{css}">{delta}</span></div></div>""",
                unsafe_allow_html=True)

# ---------- Load ----------
load = cached_load(DATA_CSV_URL, CONFIG_CSV_URL)
cfg = load.config
raw = load.records

# ---------- Sidebar ----------
st.sidebar.header("Period")
months = month_options(raw)
years = year_options(raw)
d_month, d_year = default_period(raw)
month = st.sidebar.selectbox("Month", months, index=months.index(d_month) if d_month in months else 0)
year = st.sidebar.selectbox("Year", years, index=years.index(d_year) if d_year in years else 0)
fee_pct = st.sidebar.number_input("Fee %", min_value=FEE_MIN, max_value=FEE_MAX, step=FEE_STEP,
                                  value=float(min(max(cfg.fee_pct, FEE_MIN), FEE_MAX)))
st.sidebar.markdown("---")
if st.sidebar.button("↻ Refresh data"):
    st.cache_data.clear()
    st.rerun()

# ---------- Recalculate ----------
view = month_view(raw, month, year, fee_pct)
weeks = weekly_summary(view)
totals = month_totals(view)
prev = previous_totals(raw, month, year, fee_pct)
pv = (lambda k: None) if prev is None else prev.get
fc = lambda v: fmt_cur(v, cfg.currency)
log.debug("recalculated %s %s at %.1f%% fee: %d days", month, year, fee_pct, len(view))

# ---------- Header ----------
badge = '<span class="badge-live">● live</span>' if load.source == "live" else '<span class="badge-demo">● demo</span>'
st.title(f"{cfg.store_name or 'Store'} — Revenue / Profit")
st.markdown(f"{badge} &nbsp; {month} {year}", unsafe_allow_html=True)
if load.source == "demo":
    st.warning(f"Showing demo data ({load.data_error}).")
if view.empty:
    st.info(f"No day rows for {month} {year}. Pick another period in the sidebar.")
    st.stop()

# ---------- KPI cards ----------
cards = [
    ("Total Sales", fc(totals["revenue"]), "100%", "revenue", False),
    ("Gross Profit", fc(totals["profit"]), f"{totals['profit_pct']:.0f}%", "profit", False),
    ("Adspend", fc(totals["adspend"]), f"{totals['adspend_pct']:.0f}%", "adspend", False),
    ("Avg. ROAS", fmt_roas(totals["roas"]), "", "roas", False),
    ("COG", fc(totals["cog"]), f"{totals['cog_pct']:.0f}%", "cog", True),
    ("Refunds", fc(totals["refunds"]), f"{totals['refunds_pct']:.0f}%", "refunds", True),
    ("Fees", fc(totals["fees"]), f"{fee_pct:g}%", "fees", True),
    ("Disputes", f"{totals['disputes']:.0f}", "", "disputes", True),
]
for row in (cards[:4], cards[4:]):
    for col, (label, value, sub, key, invert) in zip(st.columns(4), row):
        with col: kpi(label, value, sub, totals[key], pv(key), invert)

# ---------- Tabs ----------
tab_daily, tab_weekly, tab_export = st.tabs(["Daily", "Weekly", "Export"])

with tab_daily:
    title = f"Revenue / Profit{' — ' + cfg.store_name if cfg.store_name else ''} — {month}"
    st.plotly_chart(revenue_profit_fig(view, title, cfg.currency), use_container_width=True)
    st.plotly_chart(roas_fig(view, totals["roas"], f"ROAS — {month}"), use_container_width=True)

with tab_weekly:
    st.subheader("Weekly P&L")
    st.dataframe(weekly_table(view, weeks, cfg.currency), use_container_width=True, hide_index=True)

with tab_export:
    st.subheader("Export")
    st.download_button("Download month (CSV)", view_csv(view), f"pnl_{month}_{year}.csv", "text/csv")
    st.download_button("Download weekly summary (CSV)", weekly_csv(weeks), f"pnl_weekly_{month}_{year}.csv", "text/csv")
    lines = summary_lines(totals, prev, month, year, fee_pct, cfg.currency, cfg.store_name, load.source)
    st.download_button("Download PDF summary", pdf_from_text("\n".join(lines)),
                       f"pnl_{month}_{year}.pdf", "application/pdf")

st.markdown(f'<div class="small-note">P&L — {load.source} · {totals["days"]} days · {len(weeks)} weeks · Fee: {fee_pct:g}%</div>',
            unsafe_allow_html=True)
