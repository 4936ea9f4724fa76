import math
import sys
import unittest
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pnl_parse  # noqa: E402
from pnl_parse import (  # noqa: E402
    DashboardConfig,
    RECORD_COLUMNS,
    clean_num,
    find_header,
    map_columns,
    parse_config,
    parse_data_csv,
    parse_row,
    split_rows,
)


SHEET = "\n".join([
    "Clarendale P&L,,,",
    ",,,",
    "Day,Revenue,Profit,COG,Ad Spend,Refunds,Week,Month,Year",
    '1,"€1,200",300,,400,(20),Week 1,January,2026',
    "2,abc,100,50,10,0,Week 1,January,2026",
    '3,500',
    'Total,"€5,000",900,,,,,,',
    "x,900,,,,,Week 1 ,January,2026",
    ",,",
])


class ParseRowTests(unittest.TestCase):
    def test_commas_inside_quotes_stay_in_field(self):
        self.assertEqual(parse_row('a,"b,c",d'), ["a", "b,c", "d"])

    def test_fields_are_trimmed_and_quotes_dropped(self):
        self.assertEqual(parse_row('  x ,"y" , '), ["x", "y", ""])

    def test_unbalanced_quote_is_best_effort(self):
        self.assertEqual(parse_row('a,"b,c'), ["a", "b,c"])

    def test_split_rows_handles_crlf(self):
        self.assertEqual(split_rows("a,b\r\nc,d\r\n"), [["a", "b"], ["c", "d"]])


class CleanNumTests(unittest.TestCase):
    def test_currency_and_thousands(self):
        self.assertEqual(clean_num("€1,234"), 1234)
        self.assertEqual(clean_num("$ 12,000.50"), 12000.5)

    def test_parenthesized_negative(self):
        self.assertEqual(clean_num("(45)"), -45)
        self.assertEqual(clean_num("$(1,200.50)"), -1200.5)

    def test_percent(self):
        self.assertEqual(clean_num("12%"), 12)

    def test_empty_and_garbage_are_none(self):
        for raw in ("", None, "   ", "abc", "-", "nan", "inf", "#N/A"):
            with self.subTest(raw=raw):
                self.assertIsNone(clean_num(raw))

    def test_zero_is_a_value(self):
        self.assertEqual(clean_num("0"), 0)
        self.assertIsNotNone(clean_num("0"))


class HeaderTests(unittest.TestCase):
    def test_first_row_with_revenue_and_day(self):
        rows = split_rows(SHEET)
        self.assertEqual(find_header(rows), 2)

    def test_date_counts_as_day_keyword(self):
        rows = [["Notes"], ["Date", "Revenue"], ["Day", "Revenue"]]
        self.assertEqual(find_header(rows), 1)

    def test_profit_alone_is_not_enough(self):
        self.assertEqual(find_header([["Revenue", "Profit"]]), -1)

    def test_full_column_mapping(self):
        header = ["Day", "Revenue", "Total Revenue", "Profit", "Profit %", "ROAS", "COG",
                  "COG %", "Ad Spend", "Refunds", "Disputes", "Week", "Month", "Year", "Tips"]
        self.assertEqual(map_columns(header), {
            "day": 0, "revenue": 1, "profit": 3, "profit_pct": 4, "roas": 5, "cog": 6,
            "cog_pct": 7, "adspend": 8, "refunds": 9, "disputes": 10, "week": 11,
            "month": 12, "year": 13, "tips": 14,
        })

    def test_last_matching_column_wins(self):
        mapping = map_columns(["Day", "Revenue", "Revenue (net)"])
        self.assertEqual(mapping["revenue"], 2)

    def test_one_header_can_feed_several_fields(self):
        mapping = map_columns(["#", "Weekday", "Revenue"])
        self.assertEqual(mapping["day"], 1)
        self.assertEqual(mapping["week"], 1)

    def test_rules_are_an_ordered_table(self):
        fields = [f for _, f in pnl_parse.COLUMN_RULES]
        self.assertEqual(fields[:2], ["day", "revenue"])
        self.assertEqual(len(fields), len(set(fields)))


class RecordTests(unittest.TestCase):
    def setUp(self):
        self.records = parse_data_csv(SHEET)

    def test_keeps_only_valid_day_rows(self):
        self.assertEqual(list(self.records["revenue"]), [1200.0, 900.0])
        self.assertEqual(list(self.records.columns), RECORD_COLUMNS)

    def test_total_row_never_ingested(self):
        self.assertFalse((self.records["revenue"] == 5000).any())

    def test_unparseable_day_uses_running_count(self):
        self.assertEqual(list(self.records["day"]), [1.0, 2.0])

    def test_missing_cells_are_null_not_zero(self):
        first = self.records.iloc[0]
        self.assertTrue(math.isnan(first["cog"]))
        self.assertEqual(first["refunds"], -20)
        self.assertTrue(self.records["roas"].isna().all())

    def test_labels_are_trimmed(self):
        self.assertEqual(list(self.records["week"]), ["Week 1", "Week 1"])
        self.assertEqual(list(self.records["year"]), ["2026", "2026"])

    def test_no_header_gives_empty_frame(self):
        records = parse_data_csv("foo,bar,baz\n1,2,3\n")
        self.assertTrue(records.empty)
        self.assertEqual(list(records.columns), RECORD_COLUMNS)

    def test_garbage_text_never_raises(self):
        self.assertTrue(parse_data_csv('"""\n,,,\x00').empty)
        self.assertTrue(parse_data_csv("").empty)


class ConfigTests(unittest.TestCase):
    def test_known_keys_applied(self):
        cfg = parse_config("Fee %,9.5\nStore name,Clarendale\nCurrency,€\nfoo,bar\n")
        self.assertEqual(cfg, DashboardConfig(fee_pct=9.5, store_name="Clarendale", currency="€"))

    def test_bad_or_blank_values_keep_defaults(self):
        defaults = DashboardConfig(fee_pct=7.0, store_name="Shop", currency="£")
        cfg = parse_config("Fee,n/a\nStore,\nCurr", defaults)
        self.assertEqual(cfg, defaults)

    def test_defaults_not_mutated(self):
        defaults = DashboardConfig()
        parse_config("fee,12", defaults)
        self.assertEqual(defaults.fee_pct, 8.5)


if __name__ == "__main__":
    unittest.main()
