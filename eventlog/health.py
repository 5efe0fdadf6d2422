"""
Health checks for liveness and readiness probes.
"""
from datetime import datetime, timezone
from typing import Dict, Any
import psutil
from .logging import get_logger

logger = get_logger()


class HealthChecker:
    """
    Health checker for the event logging service.

    Provides:
    - Liveness checks (is the service running?)
    - Readiness checks (can the service take writes?)
    """

    def __init__(self, event_log, service_name: str = "eventlog", version: str = "0.1.0"):
        self.event_log = event_log
        self.service_name = service_name
        self.version = version

    def _timestamp(self) -> str:
        return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")

    def liveness(self) -> Dict[str, Any]:
        """
        Liveness check - basic health check.

        Returns:
            dict: Health status with service info and timestamp
        """
        return {
            "status": "ok",
            "service": self.service_name,
            "version": self.version,
            "timestamp": self._timestamp(),
        }

    async def readiness(self) -> Dict[str, Any]:
        """
        Readiness check.

        Checks:
        - Store connectivity
        - Memory availability

        Returns:
            dict: Readiness status with detailed check results
        """
        checks = {}
        overall_status = "ready"

        store_check = await self._check_store()
        checks["store"] = store_check
        if store_check["status"] == "error":
            overall_status = "not_ready"

        memory_check = self._check_memory()
        checks["memory"] = memory_check
        if memory_check["status"] == "error":
            overall_status = "not_ready"

        return {
            "status": overall_status,
            "service": self.service_name,
            "version": self.version,
            "timestamp": self._timestamp(),
            "checks": checks,
        }

    async def _check_store(self) -> Dict[str, Any]:
        backend = type(self.event_log.store).__name__
        try:
            healthy = await self.event_log.health_check()
        except Exception as e:
            logger.warning("store_health_check_failed", error=str(e), backend=backend)
            return {"status": "error", "backend": backend, "error": str(e)}

        return {"status": "ok" if healthy else "error", "backend": backend}

    def _check_memory(self, threshold_mb: float = 50.0) -> Dict[str, Any]:
        """
        Check available memory.

        Args:
            threshold_mb: Minimum available memory in MB (default: 50.0)

        Returns:
            dict: Memory health check result
        """
        try:
            memory = psutil.virtual_memory()
            available_mb = memory.available / (1024**2)

            if available_mb < threshold_mb:
                status = "error"
            elif available_mb < threshold_mb * 2:
                status = "warning"
            else:
                status = "ok"

            return {
                "status": status,
                "available_mb": round(available_mb, 2),
                "total_mb": round(memory.total / (1024**2), 2),
                "used_percent": memory.percent,
            }

        except Exception as e:
            logger.warning("memory_health_check_failed", error=str(e))
            return {
                "status": "error",
                "error": str(e),
            }
