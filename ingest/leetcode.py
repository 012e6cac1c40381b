"""LeetCode profile API ingestion.

This module talks to a public LeetCode profile proxy (``alfa-leetcode-api``
compatible) which exposes one JSON endpoint per facet of a user:

    /<user>/calendar?year=<Y>   yearly submission calendar
    /<user>/profile             solved counts by difficulty
    /<user>/skill               per-tag solved counts (three buckets)
    /<user>/contest             contest rating / ranking

The proxy sits behind Cloudflare, so requests go through a single
``cloudscraper`` session.  None of the public functions raise on network or
payload trouble: each returns either :class:`FetchOk` or :class:`FetchError`
and leaves the decision of what a failure means to the caller.

Configuration (environment)
---------------------------
    LS_API_URL   – base URL of the proxy
    LS_TIMEOUT   – per-request transport timeout in seconds (default 20)

Usage
-----
>>> from ingest.leetcode import fetch_problem_stats
>>> res = fetch_problem_stats("neal_wu")
>>> if isinstance(res, FetchOk):
...     print(res.value["hardSolved"])
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Union

import cloudscraper
from cloudscraper.exceptions import CloudflareException
import requests

from etl.models import YearlyActivity

logger = logging.getLogger(__name__)

API_URL = os.getenv("LS_API_URL", "https://alfa-leetcode-api.onrender.com").rstrip("/")
TIMEOUT = float(os.getenv("LS_TIMEOUT", "20"))

RATE_LIMIT_MESSAGE = "Too Many Requests. Please wait a moment before trying again."

# Single scraper instance (handles Cloudflare automatically)
scraper = cloudscraper.create_scraper()


# ----------------------------------------------------------------------------
# Result types
# ----------------------------------------------------------------------------

@dataclass(frozen=True)
class FetchOk:
    value: Any


@dataclass(frozen=True)
class FetchError:
    """A failed fetch.

    ``kind`` is one of ``rate_limited``, ``http``, ``transport`` or
    ``malformed``.  Only the rate-limit case gets a different message for
    the user; the core treats every kind the same way.
    """

    kind: str
    message: str
    status: Optional[int] = None

    @property
    def user_message(self) -> str:
        if self.kind == "rate_limited":
            return RATE_LIMIT_MESSAGE
        return self.message


FetchResult = Union[FetchOk, FetchError]


# ----------------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------------

def _get_json(path: str, what: str, params: Optional[Dict[str, Any]] = None) -> FetchResult:
    """GET ``API_URL + path`` and classify the outcome."""

    url = f"{API_URL}{path}"
    try:
        resp = scraper.get(url, params=params, timeout=TIMEOUT)
    except (requests.RequestException, CloudflareException) as exc:
        logger.exception("Failed to fetch %s from %s", what, url)
        return FetchError("transport", f"Failed to fetch {what}: {exc}")

    if resp.status_code == 429:
        logger.warning("Rate limited fetching %s (%s)", what, url)
        return FetchError("rate_limited", RATE_LIMIT_MESSAGE, 429)

    if not 200 <= resp.status_code < 300:
        logger.warning("%s request returned %s", what, resp.status_code)
        return FetchError("http", f"Failed to fetch {what}", resp.status_code)

    try:
        data = resp.json()
    except ValueError:
        logger.warning("%s response is not valid JSON", what)
        return FetchError("transport", f"Invalid JSON body for {what}", resp.status_code)

    if not isinstance(data, dict):
        return FetchError("malformed", f"Unexpected {what} payload", resp.status_code)

    errors = data.get("errors")
    if errors:
        first = errors[0] if isinstance(errors, list) else errors
        message = first.get("message", str(first)) if isinstance(first, dict) else str(first)
        logger.warning("Upstream error for %s: %s", what, message)
        return FetchError("malformed", message, resp.status_code)

    return FetchOk(data)


def _require(data: Dict[str, Any], keys: Sequence[str], what: str) -> Optional[FetchError]:
    missing = [k for k in keys if k not in data]
    if missing:
        logger.warning("%s payload missing fields: %s", what, ", ".join(missing))
        return FetchError("malformed", f"{what} payload missing {', '.join(missing)}")
    return None


# ----------------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------------

def fetch_yearly_activity(username: str, year: int) -> FetchResult:
    """Return one year's activity slice as ``FetchOk(YearlyActivity)``."""

    res = _get_json(f"/{username}/calendar", "user calendar", params={"year": year})
    if isinstance(res, FetchError):
        return res

    data = res.value
    err = _require(data, ("totalActiveDays", "streak", "activeYears", "submissionCalendar"), "calendar")
    if err is not None:
        return err

    calendar = data["submissionCalendar"]
    # Some proxy versions inline the object instead of a JSON string
    if not isinstance(calendar, str):
        calendar = json.dumps(calendar)

    try:
        slice_ = YearlyActivity(
            year=year,
            total_active_days=int(data["totalActiveDays"] or 0),
            streak=int(data["streak"] or 0),
            active_years=tuple(int(y) for y in data["activeYears"] or ()),
            submission_calendar=calendar,
        )
    except (TypeError, ValueError) as exc:
        return FetchError("malformed", f"Bad calendar payload: {exc}")

    return FetchOk(slice_)


def fetch_problem_stats(username: str) -> FetchResult:
    """Return the raw profile dict (``easySolved``, ``mediumSolved``, ``hardSolved``, …)."""

    res = _get_json(f"/{username}/profile", "user stats")
    if isinstance(res, FetchOk):
        err = _require(res.value, ("easySolved", "mediumSolved", "hardSolved"), "profile")
        if err is not None:
            return err
    return res


def fetch_topic_stats(username: str) -> FetchResult:
    """Return ``{"fundamental": [...], "intermediate": [...], "advanced": [...]}``.

    Missing buckets are filled with empty lists; each entry keeps the
    upstream keys (``tagName``, ``tagSlug``, ``problemsSolved``).
    """

    res = _get_json(f"/{username}/skill", "user skills")
    if isinstance(res, FetchError):
        return res

    buckets: Dict[str, List[Dict[str, Any]]] = {}
    for bucket in ("fundamental", "intermediate", "advanced"):
        tags = res.value.get(bucket) or []
        if not isinstance(tags, list):
            return FetchError("malformed", f"skill bucket {bucket!r} is not a list")
        buckets[bucket] = tags
    return FetchOk(buckets)


def fetch_contest_stats(username: str) -> FetchResult:
    """Return the raw contest dict (``contestRating``, ``contestAttend``, …)."""

    res = _get_json(f"/{username}/contest", "user contest data")
    if isinstance(res, FetchOk):
        err = _require(res.value, ("contestAttend",), "contest")
        if err is not None:
            return err
    return res


__all__ = [
    "FetchOk",
    "FetchError",
    "FetchResult",
    "fetch_yearly_activity",
    "fetch_problem_stats",
    "fetch_topic_stats",
    "fetch_contest_stats",
]
