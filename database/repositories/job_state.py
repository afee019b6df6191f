import logging
from typing import Optional

from sqlalchemy import select

from database.models import JobState
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class JobStateRepository(BaseRepository):
    """Checkpoints for interrupted scheduled runs."""

    def get_value(self, key: str) -> Optional[str]:
        stmt = select(JobState.value).where(JobState.key == key)
        return self.db.execute(stmt).scalar_one_or_none()

    def set_value(self, key: str, value: Optional[str]) -> None:
        state = self.db.execute(select(JobState).where(JobState.key == key)).scalar_one_or_none()
        if state is None:
            self.db.add(JobState(key=key, value=value))
        else:
            state.value = value
        self.db.flush()

    def clear(self, key: str) -> None:
        self.set_value(key, None)
