"""Utilidades de fecha y reloj compartidas.

Convenciones:
- Las fechas de negocio son ``datetime.date`` (sin zona horaria).
- Los relojes de fichaje son cadenas ``"HH:MM"`` (se ignoran los segundos).
- El día de la semana sigue la convención domingo = 0 ... sábado = 6.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timezone
from typing import Tuple


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def clock_to_minutes(clock: str) -> int:
    parts = clock.split(":")
    return int(parts[0]) * 60 + int(parts[1])


def clock_to_fractional_hour(clock: str) -> float:
    return clock_to_minutes(clock) / 60.0


def hours_between(clock_in: str, clock_out: str) -> float:
    """Horas entre dos relojes del mismo día.

    No hay rollover de medianoche: si ``clock_out`` es anterior a ``clock_in``
    el resultado es negativo.
    """

    return (clock_to_minutes(clock_out) - clock_to_minutes(clock_in)) / 60.0


def days_between(start: date, end: date) -> int:
    return (end - start).days


def day_of_week(value: date) -> int:
    # date.weekday(): lunes = 0; aquí domingo = 0
    return (value.weekday() + 1) % 7


def is_weekend(value: date) -> bool:
    return day_of_week(value) in (0, 6)


def end_of_month(value: date) -> date:
    last_day = calendar.monthrange(value.year, value.month)[1]
    return value.replace(day=last_day)


def current_semimonthly_period(today: date) -> Tuple[date, date]:
    """Periodo quincenal (1-15 / 16-fin de mes) que contiene ``today``."""

    if today.day <= 15:
        return today.replace(day=1), today.replace(day=15)
    return today.replace(day=16), end_of_month(today)
