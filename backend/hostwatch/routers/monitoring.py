from __future__ import annotations

import logging
import os
import platform
import time
from datetime import datetime, timezone

import psutil
from fastapi import APIRouter, Depends

from hostwatch.config import Settings, get_settings
from hostwatch.dependencies import get_aggregator
from hostwatch.schemas.snapshot import Snapshot
from hostwatch.services.aggregator import Aggregator


logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["monitoring"])


@router.get("/monitoring-data", response_model=Snapshot)
async def monitoring_data(aggregator: Aggregator = Depends(get_aggregator)):
    """One snapshot of every metric source. SnapshotError is mapped to a 500 in main."""
    logger.debug("Fetching monitoring data...")
    snapshot = await aggregator.collect()
    logger.debug("Successfully fetched monitoring data for %d GPU(s)", len(snapshot.gpus))
    return snapshot


@router.get("/debug-info")
async def debug_info(settings: Settings = Depends(get_settings)):
    process = psutil.Process(os.getpid())
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "process": {
            "pid": process.pid,
            "memoryUsage": {"rss": process.memory_info().rss},
            "uptime": round(time.time() - process.create_time(), 3),
        },
        "environment": {
            "pythonVersion": platform.python_version(),
            "platform": platform.system().lower(),
            "arch": platform.machine(),
            "debugMode": settings.debug,
        },
    }
