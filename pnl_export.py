# pnl_export.py: CSV downloads and a one-page PDF summary of the month.

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from pnl_calc import wow
from pnl_charts import fmt_change, fmt_cur, fmt_roas


def view_csv(view):
    return view.to_csv(index=False).encode("utf-8")

def weekly_csv(weeks):
    return weeks.to_csv(index=False).encode("utf-8")


def summary_lines(totals, prev, month, year, fee_pct, currency="$", store_name="", source="live"):
    fc = lambda v: fmt_cur(v, currency)
    def vs(key, invert=False):
        if prev is None: return ""
        pct, _ = wow(totals[key], prev.get(key), invert)
        return "" if pct is None else f"  ({fmt_change(pct)} MoM)"
    lines = [
        f"{store_name or 'Store'} - Revenue / Profit",
        f"Period: {month} {year}  |  Fee: {fee_pct:g}%  |  Data: {source}",
        "",
        f"Total sales: {fc(totals['revenue'])}{vs('revenue')}",
        f"Gross profit: {fc(totals['profit'])} ({totals['profit_pct']:.0f}%){vs('profit')}",
        f"Adspend: {fc(totals['adspend'])} ({totals['adspend_pct']:.0f}%){vs('adspend')}",
        f"Avg. ROAS: {fmt_roas(totals['roas'])}{vs('roas')}",
        f"COG: {fc(totals['cog'])} ({totals['cog_pct']:.0f}%){vs('cog', True)}",
        f"Refunds: {fc(totals['refunds'])} ({totals['refunds_pct']:.0f}%){vs('refunds', True)}",
        f"Fees: {fc(totals['fees'])}{vs('fees', True)}",
        f"Disputes: {totals['disputes']:.0f}{vs('disputes', True)}",
        f"Days: {totals['days']}",
    ]
    return lines


# --- ASCII-safe PDF builder (core fonts are latin-1 only) ---
SAFE_MAP = str.maketrans({
    "–": "-", "—": "-", "−": "-",
    "→": "->", "←": "<-",
    "▲": "^", "▼": "v",
    "’": "'", "‘": "'", "“": '"', "”": '"',
    "€": "EUR ",
    "\t": "  ",
})

def pdf_from_text(txt: str) -> bytes:
    clean = (txt or "").translate(SAFE_MAP)
    clean = clean.encode("latin-1", "replace").decode("latin-1")

    pdf = FPDF()
    pdf.set_margins(15, 15, 15)
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()
    pdf.set_font("Helvetica", size=12)

    for line in clean.split("\n"):
        if not line.strip():
            pdf.ln(4)
            continue
        pdf.multi_cell(0, 8, line, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    return bytes(pdf.output())
