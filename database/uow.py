import contextlib
import logging
from typing import Optional

from sqlalchemy.orm import sessionmaker

from database.repositories import CreatorRepository, JobStateRepository

logger = logging.getLogger(__name__)


class CreatorUnitOfWork:
    """Repositories sharing one Session, i.e. one transaction."""

    def __init__(self, session):
        self.session = session
        self.creators = CreatorRepository(session)
        self.job_state = JobStateRepository(session)


@contextlib.contextmanager
def creator_uow(session_factory: Optional[sessionmaker] = None):
    """Per-unit-of-work transaction scope.

    Yields a CreatorUnitOfWork bound to a fresh Session. Commits on success,
    rolls back on exception, always closes. Each page of a scheduled job is
    one unit of work, so a page is applied wholly or not at all.

    Usage:
        with creator_uow(factory) as uow:
            page = uow.creators.list_creators(role, cursor, 500)
        # commit happens automatically on successful exit
    """
    if session_factory is None:
        from database.database import SessionLocal
        session_factory = SessionLocal

    session = session_factory()
    try:
        yield CreatorUnitOfWork(session)
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
