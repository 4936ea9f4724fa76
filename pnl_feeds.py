# pnl_feeds.py: fetch the data and config sheets (published as CSV) and turn
# them into one immutable load result. Failures never escape: the data feed
# falls back to the demo month, the config feed to its defaults.

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Optional

import pandas as pd
import requests

from pnl_demo import demo_records
from pnl_parse import DashboardConfig, parse_config, parse_data_csv

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeedResult:
    text: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self):
        return self.error is None and self.text is not None


@dataclass(frozen=True)
class LoadResult:
    records: pd.DataFrame
    source: str                      # "live" or "demo"
    config: DashboardConfig = field(default_factory=DashboardConfig)
    data_error: Optional[str] = None


def fetch_feed(url, session=None, timeout=None) -> FeedResult:
    """One GET of a published sheet. Errors come back in the result, never raised."""
    if not (url or "").strip():
        return FeedResult(error="not configured")
    http = session or requests
    try:
        resp = http.get(url, allow_redirects=True, headers={"Cache-Control": "no-cache"}, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as exc:
        log.warning("fetch failed for %s: %s", url, exc)
        return FeedResult(error=str(exc) or exc.__class__.__name__)
    return FeedResult(text=resp.content.decode("utf-8-sig", errors="replace"))


def records_from(feed: FeedResult):
    """(records, error) for the data feed; zero parsed rows counts as a failure."""
    if not feed.ok:
        return None, feed.error
    records = parse_data_csv(feed.text)
    if records.empty:
        return None, "no day rows found in data sheet"
    return records, None


def config_from(feed: FeedResult, defaults=DashboardConfig()):
    if not feed.ok:
        log.info("config feed unavailable (%s), using defaults", feed.error)
        return defaults
    return parse_config(feed.text, defaults)


def load_dashboard(data_url, config_url, defaults=DashboardConfig(), session=None, timeout=None) -> LoadResult:
    """Fetch both feeds concurrently and build the load result."""
    with ThreadPoolExecutor(max_workers=2) as pool:
        data_job = pool.submit(fetch_feed, data_url, session, timeout)
        config_job = pool.submit(fetch_feed, config_url, session, timeout)
        data_feed = data_job.result()
        config_feed = config_job.result()

    records, error = records_from(data_feed)
    config = config_from(config_feed, defaults)
    if records is None:
        log.info("using demo data: %s", error)
        return LoadResult(records=demo_records(), source="demo", config=config, data_error=error)
    log.info("loaded %d day records from data sheet", len(records))
    return LoadResult(records=records, source="live", config=config)
