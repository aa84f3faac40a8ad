"""Fixtures compartidas para los tests del motor de anomalías."""

from datetime import date, datetime, timedelta, timezone
from itertools import count
from typing import Any, Dict

import pytest

from payroll_anomaly.ml_service.models.timecard import (
    EmployeeRecord,
    PayRunRecord,
    ScheduleRecord,
    TimeEntryRecord,
)


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def fixed_clock():
    """Reloj determinista: cada llamada avanza un segundo."""
    base = datetime(2026, 10, 20, 12, 0, tzinfo=timezone.utc)
    ticks = count()
    return lambda: base + timedelta(seconds=next(ticks))


@pytest.fixture
def today() -> date:
    # Martes; el periodo quincenal actual cierra el 31
    return date(2026, 10, 20)


@pytest.fixture
def scan_batch(today) -> Dict[str, Any]:
    """Lote con un único fichaje claramente anómalo.

    - emp-s: un fichaje el sábado 17 (día de pago ejecutado), 02:00-17:30.
    - emp-1..emp-6: fichaje idéntico martes 20, 09:00-17:00.
    - emp-7: solo un fichaje abierto (sin entradas elegibles).
    - ghost: fichaje de un empleado desconocido (se ignora).

    El fichaje de emp-s difiere de los normales en las 9 features, así que
    cualquier árbol lo aísla en el primer corte.
    """
    schedules = [ScheduleRecord(id="sched-std", name="Office", start_time="09:00")]
    employees = [
        EmployeeRecord(id="emp-s", name="Sam", pay_type="hourly", rate_cents=2500, schedule_id="sched-std"),
    ]
    employees += [
        EmployeeRecord(id=f"emp-{i}", name=f"Worker {i}", pay_type="yearly", rate_cents=9_000_000, schedule_id="sched-std")
        for i in range(1, 8)
    ]

    time_entries = [
        TimeEntryRecord(id="te-s", employee_id="emp-s", date=date(2026, 10, 17), clock_in="02:00", clock_out="17:30"),
    ]
    time_entries += [
        TimeEntryRecord(id=f"te-{i}", employee_id=f"emp-{i}", date=today, clock_in="09:00", clock_out="17:00")
        for i in range(1, 7)
    ]
    time_entries += [
        TimeEntryRecord(id="te-open", employee_id="emp-7", date=today, clock_in="09:00", clock_out=None),
        TimeEntryRecord(id="te-ghost", employee_id="ghost", date=today, clock_in="09:00", clock_out="17:00"),
    ]

    pay_runs = [
        PayRunRecord(id="pr-1", period_start=date(2026, 10, 3), period_end=date(2026, 10, 17), status="executed"),
        PayRunRecord(id="pr-2", period_start=date(2026, 10, 18), period_end=date(2026, 10, 31), status="draft"),
    ]

    return {
        "employees": employees,
        "time_entries": time_entries,
        "pay_runs": pay_runs,
        "schedules": schedules,
    }
