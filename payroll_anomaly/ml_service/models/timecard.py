"""Registros de entrada que entrega el sistema de nómina.

Solo se modelan los campos que consume el motor de anomalías.
"""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

CLOCK_PATTERN = r"^\d{1,2}:\d{2}(:\d{2})?$"


class PayRunStatus(str, Enum):
    DRAFT = "draft"
    APPROVED = "approved"
    PROCESSING = "processing"
    EXECUTED = "executed"
    FAILED = "failed"


class EmployeeRecord(BaseModel):
    id: str
    name: str = ""
    company_id: Optional[str] = None
    # yearly | daily | hourly
    pay_type: str = "hourly"
    rate_cents: int = Field(0, ge=0)
    schedule_id: Optional[str] = None
    active: bool = True


class ScheduleRecord(BaseModel):
    id: str
    name: str = ""
    start_time: Optional[str] = Field(None, pattern=CLOCK_PATTERN)
    hours_per_day: float = 8.0
    working_days: List[int] = Field(default_factory=lambda: [1, 2, 3, 4, 5])


class TimeEntryRecord(BaseModel):
    id: str
    employee_id: str
    date: dt.date
    clock_in: str = Field(..., pattern=CLOCK_PATTERN)
    clock_out: Optional[str] = Field(None, pattern=CLOCK_PATTERN)


class PayRunRecord(BaseModel):
    id: str
    period_start: dt.date
    period_end: dt.date
    status: PayRunStatus = PayRunStatus.DRAFT


class ScanInput(BaseModel):
    """Lote completo para un scan (formato del CLI)."""

    employees: List[EmployeeRecord] = Field(default_factory=list)
    time_entries: List[TimeEntryRecord] = Field(default_factory=list)
    pay_runs: List[PayRunRecord] = Field(default_factory=list)
    schedules: List[ScheduleRecord] = Field(default_factory=list)
