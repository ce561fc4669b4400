"""
In-memory schedule repository seeded from a JSON fixture, for ``--mock`` runs.
"""

import json
import logging
from dataclasses import replace
from pathlib import Path

from ..services.repository import InMemoryScheduleRepository
from .wire import ScheduleSchema

logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = Path(__file__).parent / "mock_schedules.json"


class MockScheduleRepository(InMemoryScheduleRepository):
    """
    Repository that behaves like the remote store without any network access.

    Fixture schedules are handed to ``owner_id`` so the mock works with
    whatever owner the configuration names.
    """

    def __init__(self, owner_id: str, data_file: Path | None = None):
        super().__init__()
        self.owner_id = owner_id
        self.data_file = data_file or DEFAULT_DATA_FILE
        self._load_schedules()

    def _load_schedules(self) -> None:
        """Load fixture schedules; a missing file means an empty store."""
        if not self.data_file.exists():
            logger.warning("Mock data file %s not found, starting empty", self.data_file)
            return

        with open(self.data_file, "r", encoding="utf-8") as f:
            records = json.load(f)

        for record in records:
            schedule = ScheduleSchema.model_validate(record).to_domain()
            self._schedules[schedule.id] = replace(schedule, owner_id=self.owner_id)

        logger.debug("Loaded %d mock schedule(s) from %s", len(self._schedules), self.data_file)
