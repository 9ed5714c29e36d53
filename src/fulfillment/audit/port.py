"""Audit sink port — append-only record of administrative actions."""

from abc import ABC, abstractmethod
from datetime import datetime


class AuditSinkPort(ABC):
    @abstractmethod
    def record(
        self,
        actor_id: str,
        action: str,
        success: bool,
        details: dict,
        origin: str,
        timestamp: datetime,
    ) -> None:
        """Append one audit record. Records are never updated."""
        ...
