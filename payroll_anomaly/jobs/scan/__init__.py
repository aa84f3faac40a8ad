"""Scan job package: one-shot anomaly scan from a JSON batch.

Modules:
- config: ScanJobConfig dataclass
- runner: Orchestrator (run_scan)
- cli: CLI entry point (main)
"""

from .config import ScanJobConfig
from .runner import run_scan
from .cli import main

__all__ = ["ScanJobConfig", "run_scan", "main"]
