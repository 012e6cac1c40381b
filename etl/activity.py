"""Activity aggregation: merge per-year submission calendars.

The upstream API only serves one calendar year per request.  The slice for
the current year carries ``activeYears``, the authoritative list of years
with any activity, so aggregation is two-phase:

1. fetch the current year (blocking, its year list drives the rest);
2. fetch every other active year concurrently and wait for all of them.

Only a failed current-year fetch zeroes the result.  A failed or undecodable
other year is logged and contributes nothing.

Known simplifications, kept on purpose and covered by tests:

* ``total_active_days`` is the plain sum of each slice's own count, with no
  deduplication against the merged calendar.
* ``streak`` is copied from the current-year slice, never recomputed from
  the merged history.
"""

from __future__ import annotations

import json
import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import date
from typing import Callable, Dict, List, Mapping, Optional, Union

from tqdm import tqdm

from etl.models import AggregatedActivity, YearlyActivity
from ingest import leetcode
from ingest.leetcode import FetchError, FetchOk, FetchResult

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400
MAX_WORKERS = int(os.getenv("LS_MAX_WORKERS", "8"))

YearFetcher = Callable[[str, int], FetchResult]


class CalendarDecodeError(ValueError):
    """Calendar payload is not a JSON object of ``{epoch-seconds: count}``."""


def decode_calendar(payload: Union[str, Mapping]) -> Dict[int, int]:
    """Decode a calendar payload into ``{day-start epoch seconds: count}``.

    Keys are normalised to ``int`` here so that ``"1704067200"`` and
    ``1704067200`` land on the same day.  Raises :class:`CalendarDecodeError`
    on anything that is not a flat object of integer-like keys and counts.
    """

    if isinstance(payload, str):
        try:
            raw = json.loads(payload)
        except ValueError as exc:
            raise CalendarDecodeError(f"invalid JSON: {exc}") from exc
    else:
        raw = payload

    if not isinstance(raw, Mapping):
        raise CalendarDecodeError(f"expected an object, got {type(raw).__name__}")

    calendar: Dict[int, int] = {}
    for key, count in raw.items():
        try:
            calendar[int(key)] = int(count)
        except (TypeError, ValueError) as exc:
            raise CalendarDecodeError(f"bad entry {key!r}: {count!r}") from exc
    return calendar


def _merge_slice(target: Dict[int, int], slice_: YearlyActivity) -> None:
    """Merge one year's calendar into *target* (last write wins per day)."""

    try:
        target.update(decode_calendar(slice_.submission_calendar))
    except CalendarDecodeError as exc:
        logger.warning("Failed to parse %d calendar, skipping it: %s", slice_.year, exc)


def _fetch_other_years(
    username: str, years: List[int], fetch: YearFetcher
) -> Dict[int, YearlyActivity]:
    """Fetch *years* concurrently; wait for every one to settle."""

    fetched: Dict[int, YearlyActivity] = {}
    if not years:
        return fetched

    with ThreadPoolExecutor(max_workers=min(MAX_WORKERS, len(years))) as pool:
        futures = {pool.submit(fetch, username, year): year for year in years}
        with tqdm(total=len(years), desc="Calendar years", unit="year", disable=len(years) < 2) as pbar:
            for fut in as_completed(futures):
                year = futures[fut]
                pbar.update(1)
                try:
                    res = fut.result()
                except Exception:  # noqa: BLE001 – a fetcher must not sink the whole join
                    logger.exception("Calendar fetch for %s/%d raised", username, year)
                    continue
                if isinstance(res, FetchOk):
                    fetched[year] = res.value
                else:
                    logger.warning("Skipping %d for %s: %s", year, username, res.message)
    return fetched


def aggregate_activity(
    username: str,
    fetch: Optional[YearFetcher] = None,
    today: Optional[date] = None,
) -> AggregatedActivity:
    """Merge every active year of *username* into one :class:`AggregatedActivity`.

    Never raises; returns an all-zero result when the current-year fetch
    fails.  ``today`` fixes the notion of "current year" (defaults to the
    system date).
    """

    fetch = fetch or leetcode.fetch_yearly_activity
    current_year = (today or date.today()).year

    try:
        first = fetch(username, current_year)
    except Exception as exc:  # noqa: BLE001
        first = FetchError("transport", str(exc))

    if isinstance(first, FetchError):
        logger.error("Aggregation failed for %s: %s", username, first.user_message)
        return AggregatedActivity()

    current: YearlyActivity = first.value
    active_years = list(current.active_years)

    # Every listed year except the current one, duplicates included
    other_years = [y for y in active_years if y != current_year]
    fetched = _fetch_other_years(username, sorted(set(other_years)), fetch)

    calendar: Dict[int, int] = {}
    _merge_slice(calendar, current)
    total_active_days = current.total_active_days

    for year in other_years:
        slice_ = fetched.get(year)
        if slice_ is None:
            continue
        total_active_days += slice_.total_active_days
        _merge_slice(calendar, slice_)

    logger.debug(
        "Aggregated %s: %d years, %d active days, streak %d",
        username, len(active_years), total_active_days, current.streak,
    )

    return AggregatedActivity(
        total_active_days=total_active_days,
        streak=current.streak,
        active_years=active_years,
        submission_calendar=calendar,
    )


def active_days_in_window(
    calendar: Union[str, Mapping],
    window_days: int = 90,
    reference: Optional[float] = None,
) -> int:
    """Count days with at least one submission in the trailing window.

    A day counts when its key lies within
    ``[reference - window_days * 86400, reference]``.  Accepts either a
    decoded mapping or the raw JSON string; undecodable input yields 0.
    """

    now = int(reference if reference is not None else time.time())
    start = now - window_days * SECONDS_PER_DAY

    try:
        days = decode_calendar(calendar)
    except CalendarDecodeError as exc:
        logger.error("Error parsing submission calendar: %s", exc)
        return 0

    return sum(1 for ts, count in days.items() if start <= ts <= now and count > 0)


__all__ = [
    "CalendarDecodeError",
    "decode_calendar",
    "aggregate_activity",
    "active_days_in_window",
]
