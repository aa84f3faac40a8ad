"""CLI entry point for a one-shot anomaly scan."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from typing import List, Optional

from pydantic import ValidationError

from payroll_anomaly.common.config import get_settings

from .config import ScanJobConfig
from .runner import run_scan

logger = logging.getLogger(__name__)


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid ISO date: {value!r}") from e


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Timecard anomaly scan (isolation forest + reputation)")
    p.add_argument("--input", required=True, help="JSON with employees, time_entries, pay_runs, schedules")
    p.add_argument("--company-id", default="default")
    p.add_argument("--today", type=_parse_date, default=None, help="reference date (YYYY-MM-DD)")
    p.add_argument("--seed", type=int, default=None, help="seed for a reproducible scan")
    p.add_argument("--persist", action="store_true", help="load/save reputation and ledger snapshot")
    p.add_argument("--db-url", default=None, help="override PAYROLL_ANOMALY_DB_URL")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )

    args = build_parser().parse_args(argv)
    cfg = ScanJobConfig(
        input_path=args.input,
        company_id=args.company_id,
        today=args.today or date.today(),
        seed=args.seed,
        persist=bool(args.persist),
        db_url=args.db_url,
    )
    logger.info("Config: input=%s company=%s today=%s persist=%s", cfg.input_path, cfg.company_id, cfg.today, cfg.persist)

    try:
        result = run_scan(cfg, settings=settings)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logger.error("Error cargando el lote de entrada: %s", e)
        return 1

    print(json.dumps(result.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
