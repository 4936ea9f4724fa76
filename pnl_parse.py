# pnl_parse.py: CSV ingestion for the P&L dashboard.
# Tolerates hand-edited sheets: header row found by keywords, columns mapped
# by substring rules, currency/percent noise stripped from numbers.

import logging
import math
import re
from dataclasses import dataclass, replace
from typing import Dict, Optional

import pandas as pd

log = logging.getLogger(__name__)

NUMERIC_FIELDS = ["day", "revenue", "profit", "profit_pct", "roas", "cog", "cog_pct",
                  "adspend", "refunds", "disputes", "tips"]
LABEL_FIELDS = ["week", "month", "year"]
RECORD_COLUMNS = NUMERIC_FIELDS + LABEL_FIELDS

_NOISE = re.compile(r"[€$,%\s]")
_PARENS = re.compile(r"\((.+)\)")


# ---------- Rows & numbers ----------
def parse_row(line):
    """Split one CSV line; quotes toggle quoted state and are dropped."""
    out, cur, quoted = [], [], False
    for ch in line:
        if ch == '"':
            quoted = not quoted
        elif ch == "," and not quoted:
            out.append("".join(cur).strip()); cur = []
        else:
            cur.append(ch)
    out.append("".join(cur).strip())
    return out

def split_rows(text):
    return [parse_row(line) for line in (text or "").splitlines()]

def clean_num(value) -> Optional[float]:
    """'€1,234' -> 1234.0, '(45)' -> -45.0, '' -> None. Never raises."""
    if value is None: return None
    s = _PARENS.sub(r"-\1", _NOISE.sub("", str(value)))
    if not s: return None
    try:
        v = float(s)
    except ValueError:
        return None
    return v if math.isfinite(v) else None


# ---------- Header detection ----------
def _has(*words):
    return lambda h: any(w in h for w in words)

def _has_not(word, without):
    return lambda h: word in h and without not in h

# Evaluated in order over every header cell; a later column matching the same
# field replaces the earlier one.
COLUMN_RULES = [
    (lambda h: "day" in h or "date" in h or h == "#", "day"),
    (_has_not("revenue", "total"), "revenue"),
    (_has_not("profit", "%"), "profit"),
    (lambda h: "profit" in h and "%" in h, "profit_pct"),
    (_has("roas"), "roas"),
    (_has_not("cog", "%"), "cog"),
    (lambda h: "cog" in h and "%" in h, "cog_pct"),
    (_has("adspend", "ad spend"), "adspend"),
    (_has("refund"), "refunds"),
    (_has("dispute"), "disputes"),
    (_has("week"), "week"),
    (_has("month"), "month"),
    (_has("year"), "year"),
    (_has("tip"), "tips"),
]

def is_header(row):
    cells = [c.lower() for c in row]
    return (any("revenue" in c for c in cells)
            and any("day" in c or "date" in c for c in cells))

def find_header(rows):
    for i, row in enumerate(rows):
        if is_header(row): return i
    return -1

def map_columns(header) -> Dict[str, int]:
    mapping = {}
    for idx, cell in enumerate(header):
        h = cell.lower().strip()
        for matches, field in COLUMN_RULES:
            if matches(h):
                mapping[field] = idx
    return mapping


# ---------- Records ----------
def _cell(row, mapping, field):
    idx = mapping.get(field)
    if idx is None or idx >= len(row): return ""
    return row[idx]

def empty_records():
    frame = pd.DataFrame({c: pd.Series(dtype=float) for c in NUMERIC_FIELDS})
    for c in LABEL_FIELDS:
        frame[c] = pd.Series(dtype=object)
    return frame[RECORD_COLUMNS]

def build_records(rows, header_idx, mapping):
    """Turn the rows below the header into day records (a DataFrame)."""
    if header_idx < 0 or not mapping:
        return empty_records()
    out = []
    for row in rows[header_idx + 1:]:
        if sum(1 for c in row if c) < 3: continue
        if "total" in _cell(row, mapping, "day").lower(): continue
        revenue = clean_num(_cell(row, mapping, "revenue"))
        if revenue is None: continue
        rec = {f: clean_num(_cell(row, mapping, f)) for f in NUMERIC_FIELDS}
        rec["revenue"] = revenue
        if rec["day"] is None or rec["day"] <= 0:
            rec["day"] = float(len(out) + 1)
        for f in LABEL_FIELDS:
            rec[f] = _cell(row, mapping, f).strip()
        out.append(rec)
    if not out:
        return empty_records()
    frame = pd.DataFrame(out, columns=RECORD_COLUMNS)
    frame[NUMERIC_FIELDS] = frame[NUMERIC_FIELDS].astype(float)
    return frame

def parse_data_csv(text):
    rows = split_rows(text)
    header_idx = find_header(rows)
    if header_idx < 0:
        log.debug("no header row among %d rows", len(rows))
        return empty_records()
    mapping = map_columns(rows[header_idx])
    log.debug("header at row %d, columns %s", header_idx, mapping)
    records = build_records(rows, header_idx, mapping)
    log.debug("parsed %d day records", len(records))
    return records


# ---------- Config feed ----------
@dataclass(frozen=True)
class DashboardConfig:
    fee_pct: float = 8.5
    store_name: str = ""
    currency: str = "$"

def parse_config(text, defaults=DashboardConfig()):
    """Apply (key, value) rows from the config sheet over `defaults`."""
    changes = {}
    for row in split_rows(text):
        key = (row[0] if row else "").lower()
        value = row[1].strip() if len(row) > 1 else ""
        if "fee" in key:
            fee = clean_num(value)
            if fee is not None: changes["fee_pct"] = fee
        if "store" in key and value:
            changes["store_name"] = value
        if "curr" in key and value:
            changes["currency"] = value
    return replace(defaults, **changes)
