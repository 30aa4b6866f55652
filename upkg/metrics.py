"""
metrics.py — Update status metrics.

Builds the `StatusRecord` consumed by the report renderer: whole days since
the last system update plus the installed / pending package counters.

The reference date and counters are taken from an injected `StatusConfig`,
so the computation is a pure function of (now, config).
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import pandas as pd
from dateutil import tz

from upkg.config import StatusConfig, parse_timestamp

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data structure
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StatusRecord:
    """Snapshot of update-related counters for one invocation."""
    days_since_update: int          # negative if `now` precedes the reference
    total_packages_installed: int
    pending_updates: int
    seconds_since_update: int
    last_update: pd.Timestamp
    generated_at: pd.Timestamp


# ---------------------------------------------------------------------------
# Time arithmetic
# ---------------------------------------------------------------------------

def _to_instant(ts: pd.Timestamp) -> pd.Timestamp:
    """Pin a naive (local wall-clock) timestamp to the system timezone.

    Subtracting two aware timestamps counts real elapsed time, so a span
    crossing a DST change is an hour shorter or longer than its wall-clock
    difference.
    """
    if ts.tzinfo is None:
        # tzlocal reads the zone at construction; build it per call
        return ts.tz_localize(tz.tzlocal())
    return ts


def elapsed(reference: Any, now: Any) -> pd.Timedelta:
    """Signed time between `reference` and `now`."""
    return _to_instant(parse_timestamp(now)) - _to_instant(parse_timestamp(reference))


def days_since(reference: Any, now: Any) -> int:
    """Whole days between two instants: floor(hours / 24).

    Args:
        reference: Baseline instant (date, datetime, Timestamp or ISO string).
        now: Instant to measure up to.

    Returns:
        Day count; negative when `now` is before `reference`.
    """
    return int(elapsed(reference, now) // pd.Timedelta(days=1))


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def compute_status(
    now: Optional[pd.Timestamp] = None,
    cfg: Optional[StatusConfig] = None,
) -> StatusRecord:
    """Compute the status record for a single report.

    Args:
        now: Instant to evaluate at. Defaults to the current local time.
        cfg: Report configuration. Defaults to the built-in StatusConfig.

    Returns:
        StatusRecord with the day count and the configured counters.
    """
    if cfg is None:
        cfg = StatusConfig()
    now = pd.Timestamp.now() if now is None else parse_timestamp(now)

    delta = elapsed(cfg.last_update, now)
    record = StatusRecord(
        days_since_update=int(delta // pd.Timedelta(days=1)),
        total_packages_installed=cfg.total_packages_installed,
        pending_updates=cfg.pending_updates,
        seconds_since_update=int(delta // pd.Timedelta(seconds=1)),
        last_update=parse_timestamp(cfg.last_update),
        generated_at=now,
    )

    if record.days_since_update < 0:
        logger.debug(
            "Reference date %s is after %s; day count is %d",
            record.last_update, now, record.days_since_update,
        )
    logger.info(
        "Status computed -- days since update: %d | installed: %d | pending: %d",
        record.days_since_update,
        record.total_packages_installed,
        record.pending_updates,
    )
    return record
