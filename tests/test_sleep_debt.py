"""Tests for the sleep-debt calculator."""

from datetime import date, timedelta

import pytest

from dreambreeze.sleep_debt import NightRecord, calculate_sleep_debt


def _nights(hours: list[float], quality: float = 100, deep: float = 20) -> list[NightRecord]:
    """Most recent night first."""
    today = date(2026, 3, 1)
    return [
        NightRecord(
            date=today - timedelta(days=i),
            hours_slept=h,
            sleep_quality=quality,
            deep_sleep_percent=deep,
        )
        for i, h in enumerate(hours)
    ]


class TestSleepDebt:
    def test_no_nights(self):
        result = calculate_sleep_debt([])
        assert result.total_debt_hours == 0
        assert result.impairment_level == "none"
        assert result.recommendations

    def test_full_nights_have_no_debt(self):
        result = calculate_sleep_debt(_nights([8.0] * 7))
        assert result.total_debt_hours == 0
        assert result.recovery_nights_needed == 0
        assert result.trend == "stable"

    def test_short_nights_accumulate(self):
        result = calculate_sleep_debt(_nights([6.0] * 7))
        assert result.total_debt_hours == pytest.approx(14.0)
        assert result.weekly_debt_hours == pytest.approx(14.0)
        assert result.recovery_nights_needed == 7
        assert result.impairment_level == "moderate"

    def test_poor_quality_adds_debt(self):
        result = calculate_sleep_debt(_nights([8.0], quality=50))
        # (1 - 0.5) * 8 * 0.2
        assert result.total_debt_hours == pytest.approx(0.8)

    def test_only_last_fourteen_nights_count(self):
        result = calculate_sleep_debt(_nights([8.0] * 14 + [0.0] * 5))
        assert result.total_debt_hours == 0

    def test_worsening_trend(self):
        result = calculate_sleep_debt(_nights([5.0] * 7 + [8.0] * 7))
        assert result.trend == "worsening"
        assert any("growing" in r for r in result.recommendations)

    def test_improving_trend(self):
        result = calculate_sleep_debt(_nights([8.0] * 7 + [5.0] * 7))
        assert result.trend == "improving"

    def test_trend_needs_three_previous_nights(self):
        result = calculate_sleep_debt(_nights([5.0] * 7 + [8.0] * 2))
        assert result.trend == "stable"

    def test_severe_impairment(self):
        result = calculate_sleep_debt(_nights([6.0] * 14))
        assert result.impairment_level == "severe"

    def test_low_deep_sleep_recommendation(self):
        result = calculate_sleep_debt(_nights([8.0] * 3, deep=10))
        assert any("deep sleep" in r for r in result.recommendations)

    def test_input_order_does_not_matter(self):
        nights = _nights([5.0] * 7 + [8.0] * 7)
        assert calculate_sleep_debt(list(reversed(nights))) == calculate_sleep_debt(nights)
