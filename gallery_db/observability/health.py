"""
Health check utilities for GALLERY_DB.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from pymongo.errors import PyMongoError

if TYPE_CHECKING:
    from ..core.connection import ConnectionManager

logger = logging.getLogger(__name__)


class HealthStatus(str, Enum):
    """Health status enumeration."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


@dataclass
class HealthCheckResult:
    """Result of a health check."""

    name: str
    status: HealthStatus
    message: str
    details: dict[str, Any] | None = None
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status.value,
            "message": self.message,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


async def check_store_health(
    manager: "ConnectionManager | None", timeout_seconds: float = 5.0
) -> HealthCheckResult:
    """
    Check that the connection manager is connected and the server answers.

    Args:
        manager: ConnectionManager to probe
        timeout_seconds: Timeout for the ping

    Returns:
        HealthCheckResult
    """
    if manager is None or not manager.is_connected:
        state = manager.state.value if manager is not None else None
        return HealthCheckResult(
            name="mongodb",
            status=HealthStatus.UNHEALTHY,
            message="MongoDB connection not established",
            details={"state": state},
        )

    details = {"db_name": manager.config.db_name, "timeout_seconds": timeout_seconds}
    try:
        await asyncio.wait_for(manager.client.admin.command("ping"), timeout=timeout_seconds)
    except asyncio.TimeoutError:
        return HealthCheckResult(
            name="mongodb",
            status=HealthStatus.UNHEALTHY,
            message=f"MongoDB ping timed out after {timeout_seconds}s",
            details=details,
        )
    except PyMongoError as e:
        logger.warning(f"MongoDB health check failed: {e}")
        return HealthCheckResult(
            name="mongodb",
            status=HealthStatus.UNHEALTHY,
            message=f"MongoDB health check failed: {e}",
            details=details,
        )

    return HealthCheckResult(
        name="mongodb",
        status=HealthStatus.HEALTHY,
        message="MongoDB connection is healthy",
        details=details,
    )
