"""Scan job configuration."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class ScanJobConfig:
    """Configuración de una ejecución puntual del scan."""
    input_path: str
    company_id: str
    today: date
    seed: Optional[int]
    persist: bool
    db_url: Optional[str]
