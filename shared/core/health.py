"""
Health and metrics endpoints.

Response bodies follow the draft "Health Check Response Format for HTTP
APIs": an overall ``status`` plus one entry per dependency under ``checks``.
"""

import logging
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Optional

import psutil
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)


class HealthStatus(str, Enum):
    PASS = "pass"
    FAIL = "fail"
    WARN = "warn"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class ServiceHealth:
    """
    Liveness, readiness and process metrics for one service.

    ``engine_factory`` returns the SQLAlchemy engine backing the catalog; it
    is called lazily so importing the router never opens a connection.
    """

    MEMORY_FAIL_MB = 100
    MEMORY_WARN_MB = 500

    def __init__(self, service_name: str, version: str = "1.0.0",
                 engine_factory: Optional[Callable[[], Engine]] = None):
        self.service_name = service_name
        self.version = version
        self.engine_factory = engine_factory
        self.start_time = time.time()
        self.checks_performed = 0

    def create_health_router(self) -> APIRouter:
        router = APIRouter(tags=["health"])

        @router.get("/health", status_code=status.HTTP_200_OK)
        def health_check() -> Dict[str, Any]:
            return {
                "status": HealthStatus.PASS,
                "service": self.service_name,
                "version": self.version,
                "timestamp": _now(),
            }

        @router.get("/health/live", status_code=status.HTTP_200_OK)
        def liveness() -> Dict[str, Any]:
            return {"status": "alive"}

        @router.get("/health/ready")
        def readiness() -> JSONResponse:
            checks = self.readiness_checks()
            overall = self.overall_status(checks)
            code = status.HTTP_503_SERVICE_UNAVAILABLE if overall == HealthStatus.FAIL else status.HTTP_200_OK
            return JSONResponse(status_code=code, content={
                "status": overall.value,
                "version": self.version,
                "serviceId": self.service_name,
                "checks": checks,
                "timestamp": _now(),
            })

        @router.get("/metrics")
        def metrics() -> Dict[str, Any]:
            process = psutil.Process()
            memory = process.memory_info()
            return {
                "service": self.service_name,
                "version": self.version,
                "uptime_seconds": time.time() - self.start_time,
                "checks_performed": self.checks_performed,
                "timestamp": _now(),
                "system": {
                    "memory_rss_bytes": memory.rss,
                    "num_threads": process.num_threads(),
                },
            }

        return router

    def readiness_checks(self) -> Dict[str, Dict[str, Any]]:
        self.checks_performed += 1
        checks = {"system:memory": self._check_memory()}
        if self.engine_factory is not None:
            checks["catalog:connectivity"] = self._check_database()
        return checks

    def _check_database(self) -> Dict[str, Any]:
        start = time.perf_counter()
        try:
            with self.engine_factory().connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.error(f"Catalog database health check failed: {e}")
            return {"status": HealthStatus.FAIL.value, "componentType": "datastore",
                    "output": str(e), "time": _now()}
        return {
            "status": HealthStatus.PASS.value,
            "componentType": "datastore",
            "observedValue": round((time.perf_counter() - start) * 1000, 2),
            "observedUnit": "ms",
            "time": _now(),
        }

    def _check_memory(self) -> Dict[str, Any]:
        available_mb = psutil.virtual_memory().available / (1024 ** 2)
        if available_mb < self.MEMORY_FAIL_MB:
            status_val = HealthStatus.FAIL
        elif available_mb < self.MEMORY_WARN_MB:
            status_val = HealthStatus.WARN
        else:
            status_val = HealthStatus.PASS
        return {
            "status": status_val.value,
            "componentType": "system",
            "observedValue": round(available_mb, 2),
            "observedUnit": "MB",
            "time": _now(),
        }

    @staticmethod
    def overall_status(checks: Dict[str, Dict[str, Any]]) -> HealthStatus:
        statuses = {check.get("status") for check in checks.values()}
        if HealthStatus.FAIL.value in statuses:
            return HealthStatus.FAIL
        if HealthStatus.WARN.value in statuses:
            return HealthStatus.WARN
        return HealthStatus.PASS
