"""Scan job orchestrator: carga lote -> scan -> snapshot opcional."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from payroll_anomaly.common.config import Settings, get_settings
from payroll_anomaly.common.db import get_engine
from payroll_anomaly.ml_service.anomaly_agent import AnomalyDetectionAgent
from payroll_anomaly.ml_service.config.ml_config import GlobalMLConfig
from payroll_anomaly.ml_service.models.anomaly_model import ScanResult
from payroll_anomaly.ml_service.models.timecard import ScanInput
from payroll_anomaly.ml_service.repository.snapshot_repository import (
    ensure_schema,
    load_anomalies,
    load_reputations,
    save_anomalies,
    save_reputations,
)

from .config import ScanJobConfig

logger = logging.getLogger(__name__)


def load_scan_input(path: str) -> ScanInput:
    with Path(path).open("r", encoding="utf-8") as fh:
        return ScanInput.model_validate(json.load(fh))


def run_scan(
    cfg: ScanJobConfig,
    settings: Settings | None = None,
    ml_cfg: GlobalMLConfig | None = None,
) -> ScanResult:
    if settings is None:
        settings = get_settings()
    if ml_cfg is None:
        ml_cfg = GlobalMLConfig.from_env()

    batch = load_scan_input(cfg.input_path)
    logger.info(
        "scan_input employees=%d entries=%d pay_runs=%d schedules=%d",
        len(batch.employees),
        len(batch.time_entries),
        len(batch.pay_runs),
        len(batch.schedules),
    )

    agent = AnomalyDetectionAgent(ml_cfg, random_state=cfg.seed)

    engine = get_engine(settings, db_url=cfg.db_url) if cfg.persist else None
    if engine is not None:
        with engine.begin() as conn:
            ensure_schema(conn)
            agent.reputation.load(load_reputations(conn))
            agent.ledger.extend(load_anomalies(conn))
        logger.info("snapshot_loaded anomalies=%d", len(agent.ledger))

    result = agent.scan(
        batch.employees,
        batch.time_entries,
        batch.pay_runs,
        batch.schedules,
        company_id=cfg.company_id,
        today=cfg.today,
    )

    if engine is not None:
        with engine.begin() as conn:
            save_reputations(conn, agent.reputation.export())
            save_anomalies(conn, result.anomalies)

    return result
