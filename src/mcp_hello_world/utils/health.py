"""
Health reporting for the HTTP transport's liveness endpoint.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class HealthStatus:
    """Liveness status snapshot."""

    status: str = "ok"
    timestamp: datetime = field(default_factory=_utc_now)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the /health response body."""
        return {
            "status": self.status,
            "timestamp": self.timestamp.isoformat().replace("+00:00", "Z"),
        }
