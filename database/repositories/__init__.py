from database.repositories.base import BaseRepository
from database.repositories.creator import CreatorRepository, CreatorPage
from database.repositories.job_state import JobStateRepository

__all__ = [
    'BaseRepository',
    'CreatorRepository',
    'CreatorPage',
    'JobStateRepository',
]
