"""Tests de severidad y motivos legibles."""

from datetime import date

import pytest

from payroll_anomaly.ml_service.config.ml_config import AnomalyConfig
from payroll_anomaly.ml_service.explain.explanation_builder import build_reasons, severity_from_score
from payroll_anomaly.ml_service.features.feature_extractor import EntryObservation, TimecardFeatures
from payroll_anomaly.ml_service.models.anomaly_model import AnomalySeverity
from payroll_anomaly.ml_service.models.timecard import EmployeeRecord, TimeEntryRecord


def _observation(is_weekend: bool = False, **overrides) -> EntryObservation:
    values = dict(
        clock_in_hour=9.0,
        clock_out_hour=17.0,
        duration_hours=8.0,
        days_since_pay_day=5,
        days_until_pay_day=6,
        occupation_type=2,
        rate_cents=2500,
        day_of_week=2,
        schedule_deviation=0.0,
    )
    values.update(overrides)
    return EntryObservation(
        features=TimecardFeatures(**values),
        is_weekend=is_weekend,
        entry=TimeEntryRecord(id="t", employee_id="e", date=date(2026, 10, 20), clock_in="09:00", clock_out="17:00"),
        employee=EmployeeRecord(id="e"),
        scheduled_start_hour=9.0,
    )


class TestSeverity:

    @pytest.mark.parametrize(
        "score,expected",
        [
            (0.55, AnomalySeverity.LOW),
            (0.649, AnomalySeverity.LOW),
            (0.65, AnomalySeverity.MEDIUM),
            (0.75, AnomalySeverity.HIGH),
            (0.849, AnomalySeverity.HIGH),
            (0.85, AnomalySeverity.CRITICAL),
            (1.0, AnomalySeverity.CRITICAL),
        ],
    )
    def test_tiers(self, score, expected):
        assert severity_from_score(score, AnomalyConfig()) == expected


class TestReasons:

    def test_fallback_when_no_rule_matches(self):
        assert build_reasons(_observation(), 0.6123) == ["Statistical outlier, score=0.612"]

    def test_rule_order(self):
        obs = _observation(
            is_weekend=True,
            clock_in_hour=2.0,
            clock_out_hour=17.5,
            duration_hours=15.5,
            days_since_pay_day=0,
            days_until_pay_day=1,
            schedule_deviation=-7.0,
        )
        assert build_reasons(obs, 0.8) == [
            "Unusually long shift: 15.5h",
            "Unusual clock-in time: 2:00",
            "Entry logged on a weekend",
            "Entry very close to pay day (0d after)",
            "Entry very close to upcoming pay day (1d before)",
            "Early by 7.0h vs schedule",
        ]

    def test_short_shift_and_late(self):
        obs = _observation(clock_in_hour=12.5, clock_out_hour=13.0, duration_hours=0.5, schedule_deviation=3.5)
        assert build_reasons(obs, 0.7) == [
            "Suspiciously short shift: 0.5h",
            "Late by 3.5h vs schedule",
        ]

    def test_zero_and_negative_durations_are_not_short(self):
        assert build_reasons(_observation(duration_hours=0.0), 0.6)[0].startswith("Statistical outlier")
        assert build_reasons(_observation(duration_hours=-16.0), 0.6)[0].startswith("Statistical outlier")

    def test_late_night_clock_in(self):
        obs = _observation(clock_in_hour=22.75)
        assert build_reasons(obs, 0.6) == ["Unusual clock-in time: 22:45"]
