from .base import Base
from .creator import Creator, CreatorBadge, XpTransaction
from .job_state import JobState

__all__ = [
    'Base',
    'Creator',
    'CreatorBadge',
    'XpTransaction',
    'JobState',
]
