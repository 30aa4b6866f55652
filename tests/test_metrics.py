"""
test_metrics.py — Unit tests for the status metrics.

Tests cover:
    - days_since floor arithmetic (exact days, partial days, negative spans)
    - Monotonicity as `now` advances
    - Timezone alignment of naive vs aware timestamps
    - compute_status with default and injected configs
"""

import sys
import time
from datetime import date, datetime
from pathlib import Path

import pandas as pd
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from upkg.config import StatusConfig
from upkg.metrics import StatusRecord, compute_status, days_since, elapsed


REFERENCE = pd.Timestamp("2025-12-01 00:00:00")

needs_tzset = pytest.mark.skipif(not hasattr(time, "tzset"), reason="time.tzset is POSIX-only")


@pytest.fixture
def local_zone(monkeypatch):
    """Pin the process timezone; yields a setter taking an IANA zone name."""
    def _set(name):
        monkeypatch.setenv("TZ", name)
        time.tzset()
    yield _set
    monkeypatch.undo()
    time.tzset()


# ---------------------------------------------------------------------------
# days_since
# ---------------------------------------------------------------------------

class TestDaysSince:
    """Tests for the whole-day delta."""

    def test_ten_days(self):
        assert days_since(REFERENCE, pd.Timestamp("2025-12-11 00:00:00")) == 10

    def test_same_instant_is_zero(self):
        assert days_since(REFERENCE, REFERENCE) == 0

    def test_partial_day_rounds_down(self):
        # 23h59m is still day 0
        assert days_since(REFERENCE, pd.Timestamp("2025-12-01 23:59:00")) == 0

    def test_just_over_one_day(self):
        assert days_since(REFERENCE, pd.Timestamp("2025-12-02 00:00:01")) == 1

    def test_now_before_reference_is_negative(self):
        assert days_since(REFERENCE, pd.Timestamp("2025-11-21 00:00:00")) == -10

    def test_negative_partial_day_floors(self):
        # -12h -> floor(-0.5) = -1
        assert days_since(REFERENCE, pd.Timestamp("2025-11-30 12:00:00")) == -1

    def test_accepts_strings_and_dates(self):
        assert days_since("2025-12-01", date(2025, 12, 11)) == 10
        assert days_since(datetime(2025, 12, 1), "2025-12-11T00:00:00") == 10

    def test_non_negative_for_later_instants(self):
        for hours in (0, 1, 23, 24, 25, 24 * 365):
            now = REFERENCE + pd.Timedelta(hours=hours)
            assert days_since(REFERENCE, now) == hours // 24
            assert days_since(REFERENCE, now) >= 0

    def test_monotonic_as_now_advances(self):
        instants = pd.date_range("2025-11-25", "2026-01-05", freq=pd.Timedelta(hours=7))
        counts = [days_since(REFERENCE, ts) for ts in instants]
        assert counts == sorted(counts)


@needs_tzset
class TestTimezoneAlignment:
    """Naive timestamps are local time; aware ones keep their zone."""

    @pytest.fixture(autouse=True)
    def utc_host(self, local_zone):
        local_zone("UTC")

    def test_naive_reference_aware_now(self):
        now = pd.Timestamp("2025-12-11 00:00:00", tz="Europe/London")
        assert days_since(REFERENCE, now) == 10

    def test_aware_reference_naive_now(self):
        ref = pd.Timestamp("2025-12-01 00:00:00", tz="UTC")
        assert days_since(ref, pd.Timestamp("2025-12-11 00:00:00")) == 10

    def test_both_aware_different_zones(self):
        ref = pd.Timestamp("2025-12-01 00:00:00", tz="UTC")
        now = pd.Timestamp("2025-12-11 01:00:00", tz="Europe/Paris")  # 00:00 UTC
        assert days_since(ref, now) == 10

    def test_elapsed_is_signed(self):
        assert elapsed(REFERENCE, "2025-11-30") == pd.Timedelta(days=-1)


@needs_tzset
class TestDaylightSaving:
    """Naive spans crossing a DST change count real elapsed hours."""

    @pytest.fixture(autouse=True)
    def new_york_host(self, local_zone):
        local_zone("America/New_York")

    def test_spring_forward_loses_an_hour(self):
        # 2026-03-08 02:00 EST -> 03:00 EDT; wall clock says 240.5h, real is 239.5h
        cfg = StatusConfig(last_update=pd.Timestamp("2026-03-01"))
        record = compute_status(pd.Timestamp("2026-03-11 00:30"), cfg)
        assert record.days_since_update == 9
        assert record.seconds_since_update == int(239.5 * 3600)

    def test_fall_back_gains_an_hour(self):
        # 2026-11-01 02:00 EDT -> 01:00 EST
        assert days_since("2026-10-25 00:00", "2026-11-03 23:30") == 10

    def test_span_without_transition_is_unchanged(self):
        assert days_since("2026-01-01", "2026-01-11") == 10


# ---------------------------------------------------------------------------
# compute_status
# ---------------------------------------------------------------------------

class TestComputeStatus:
    """Tests for the StatusRecord builder."""

    def test_returns_status_record(self):
        record = compute_status(pd.Timestamp("2025-12-11"))
        assert isinstance(record, StatusRecord)

    def test_reference_configuration(self):
        record = compute_status(pd.Timestamp("2025-12-11 00:00:00"))
        assert record.days_since_update == 10
        assert record.total_packages_installed == 150
        assert record.pending_updates == 5
        assert record.seconds_since_update == 10 * 86400

    def test_timestamps_carried_on_record(self):
        now = pd.Timestamp("2025-12-11 06:30:00")
        record = compute_status(now)
        assert record.last_update == REFERENCE
        assert record.generated_at == now

    def test_injected_config_is_used(self):
        cfg = StatusConfig(
            last_update=pd.Timestamp("2024-01-01"),
            total_packages_installed=812,
            pending_updates=0,
        )
        record = compute_status(pd.Timestamp("2024-01-31 12:00"), cfg)
        assert record.days_since_update == 30
        assert record.total_packages_installed == 812
        assert record.pending_updates == 0

    def test_future_reference_propagates_negative(self):
        cfg = StatusConfig(last_update=pd.Timestamp("2030-01-01"))
        record = compute_status(pd.Timestamp("2029-12-27"), cfg)
        assert record.days_since_update == -5
        assert record.seconds_since_update < 0

    def test_default_now_uses_clock(self):
        record = compute_status()
        expected = days_since(REFERENCE, pd.Timestamp.now())
        # allow a midnight rollover between the two calls
        assert record.days_since_update in (expected - 1, expected)

    def test_record_is_immutable(self):
        record = compute_status(pd.Timestamp("2025-12-11"))
        with pytest.raises(AttributeError):
            record.pending_updates = 7
