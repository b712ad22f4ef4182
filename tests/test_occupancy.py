"""Tests for occupancy aggregation and its block / trend roll-ups."""

from datetime import date, datetime

import pytest

from models import BookingStatus, OccupancyMetric, ReportingPeriod
from scheduler.occupancy import compute_occupancy, monthly_trend, summarize_by_block

from conftest import make_booking, make_downtime, make_reactor

MARCH = ReportingPeriod.for_month(2025, 3)  # 744 hours


def at(month, day, hour=0):
    return datetime(2025, month, day, hour)


class TestReportingPeriod:

    def test_month_bounds(self):
        assert MARCH.start == datetime(2025, 3, 1)
        assert MARCH.end == datetime(2025, 4, 1)
        assert MARCH.label == "Mar 2025"

    def test_december_rolls_into_next_year(self):
        period = ReportingPeriod.for_month(2024, 12)
        assert period.end == datetime(2025, 1, 1)

    def test_reversed_bounds_rejected(self):
        with pytest.raises(ValueError):
            ReportingPeriod(start=datetime(2025, 3, 2), end=datetime(2025, 3, 1))


class TestComputeOccupancy:

    def test_zero_activity(self):
        [m] = compute_occupancy(MARCH, [make_reactor()], [], [])
        assert m.available_hours == 744
        assert (m.proposed_hours, m.actual_hours, m.downtime_hours) == (0, 0, 0)
        assert (m.proposed_percent, m.actual_percent) == (0, 0)

    def test_booking_clipped_to_period(self):
        booking = make_booking(at(2, 28, 12), at(3, 2, 12), status=BookingStatus.CONFIRMED)
        [m] = compute_occupancy(MARCH, [make_reactor()], [booking], [])
        assert m.actual_hours == 36
        assert m.proposed_hours == 0

    def test_statuses_are_bucketed(self):
        bookings = [
            make_booking(at(3, 1, 0), at(3, 1, 12), status=BookingStatus.PROPOSED),
            make_booking(at(3, 2, 0), at(3, 2, 6), status=BookingStatus.CONFIRMED),
            make_booking(at(3, 3, 0), at(3, 4, 0), status=BookingStatus.CANCELLED),
        ]
        [m] = compute_occupancy(MARCH, [make_reactor()], bookings, [])
        assert m.proposed_hours == 12
        assert m.actual_hours == 6

    def test_downtime_reduces_available_hours(self):
        windows = [
            make_downtime(at(3, 31, 0), at(4, 2, 0)),                 # 24 in period
            make_downtime(at(3, 10, 0), at(3, 11, 0), cancelled=True)  # ignored
        ]
        bookings = [make_booking(at(3, 1), at(3, 8), status=BookingStatus.CONFIRMED)]  # 168
        [m] = compute_occupancy(MARCH, [make_reactor()], bookings, windows)
        assert m.downtime_hours == 24
        assert m.available_hours == 720
        assert m.actual_percent == pytest.approx(168 / 720 * 100)

    def test_records_outside_period_ignored(self):
        booking = make_booking(at(2, 1), at(2, 5), status=BookingStatus.CONFIRMED)
        window = make_downtime(at(4, 1), at(4, 3))
        [m] = compute_occupancy(MARCH, [make_reactor()], [booking], [window])
        assert m.actual_hours == 0
        assert m.downtime_hours == 0

    def test_fully_down_reactor_reports_zero_percent(self):
        window = make_downtime(at(2, 20), at(4, 5))
        booking = make_booking(at(3, 1), at(3, 2), status=BookingStatus.CONFIRMED)
        [m] = compute_occupancy(MARCH, [make_reactor()], [booking], [window])
        assert m.available_hours == 0
        assert m.actual_hours == 24
        assert m.actual_percent == 0

    def test_percentages_are_not_capped(self):
        window = make_downtime(at(3, 1), at(3, 31))  # leaves 24 available hours
        booking = make_booking(at(3, 1), at(3, 4), status=BookingStatus.PROPOSED)
        [m] = compute_occupancy(MARCH, [make_reactor()], [booking], [window])
        assert m.available_hours == 24
        assert m.proposed_percent == pytest.approx(300.0)

    def test_order_matches_input_and_reactors_are_isolated(self):
        reactors = [make_reactor("R-202"), make_reactor("R-101")]
        booking = make_booking(at(3, 1), at(3, 2), reactor="R-101", status=BookingStatus.CONFIRMED)
        metrics = compute_occupancy(MARCH, reactors, [booking], [])
        assert [m.reactor_serial_no for m in metrics] == ["R-202", "R-101"]
        assert metrics[0].actual_hours == 0
        assert metrics[1].actual_hours == 24

    def test_sub_hour_remainders_truncate(self):
        booking = make_booking(datetime(2025, 3, 1, 8, 0), datetime(2025, 3, 1, 9, 45))
        [m] = compute_occupancy(MARCH, [make_reactor()], [booking], [])
        assert m.proposed_hours == 1


class TestRollups:

    def test_summarize_by_block(self):
        reactors = [
            make_reactor("R-101", block="Block A"),
            make_reactor("R-102", block="Block A"),
            make_reactor("R-201", plant="Plant Beta", block="Block C"),
        ]
        bookings = [make_booking(at(3, 1), at(3, 31), reactor="R-101", status=BookingStatus.CONFIRMED)]
        metrics = compute_occupancy(MARCH, reactors, bookings, [])
        summary = summarize_by_block(metrics)

        assert [s.block_name for s in summary] == ["Block A", "Block C"]
        block_a = summary[0]
        assert block_a.reactor_count == 2
        assert block_a.actual_percent == pytest.approx(metrics[0].actual_percent / 2)
        assert summary[1].actual_percent == 0

    def test_missing_block_grouped_as_unknown(self):
        metrics = [OccupancyMetric(
            reactor_serial_no="R-999", period=MARCH.label, available_hours=744,
            proposed_hours=0, actual_hours=0, downtime_hours=0,
            proposed_percent=0.0, actual_percent=0.0, block_name=""
        )]
        assert summarize_by_block(metrics)[0].block_name == "Unknown"

    def test_monthly_trend_oldest_first(self):
        booking = make_booking(at(3, 1), at(3, 2), status=BookingStatus.CONFIRMED)
        points = monthly_trend(date(2025, 3, 15), 3, [make_reactor()], [booking], [])
        assert [p.period for p in points] == ["Jan 2025", "Feb 2025", "Mar 2025"]
        assert points[0].actual_percent == 0
        assert points[-1].actual_percent == pytest.approx(24 / 744 * 100)

    def test_monthly_trend_crosses_year_boundary(self):
        points = monthly_trend(date(2025, 1, 10), 2, [make_reactor()], [], [])
        assert [p.period for p in points] == ["Dec 2024", "Jan 2025"]

    def test_monthly_trend_filters(self):
        reactors = [make_reactor("R-101", plant="Plant Alpha"), make_reactor("R-201", plant="Plant Beta")]
        booking = make_booking(at(3, 1), at(3, 2), reactor="R-201", status=BookingStatus.CONFIRMED)
        alpha = monthly_trend(date(2025, 3, 1), 1, reactors, [booking], [], plant="Plant Alpha")
        beta = monthly_trend(date(2025, 3, 1), 1, reactors, [booking], [], plant="Plant Beta")
        empty = monthly_trend(date(2025, 3, 1), 1, reactors, [booking], [], block="Nowhere")
        assert alpha[0].actual_percent == 0
        assert beta[0].actual_percent > 0
        assert empty[0].actual_percent == 0
