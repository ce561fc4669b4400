"""
Adapters layer - Schedule store integrations (HTTP API, mock fixture).
"""

from .http_repository import HttpScheduleRepository
from .mock_repository import MockScheduleRepository

__all__ = ["HttpScheduleRepository", "MockScheduleRepository"]
