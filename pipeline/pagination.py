"""
Paginated scan - lazy, finite, restartable iteration over id-ordered records.

    scan = PagedScan(fetch_page, page_size=500)
    for page in scan:
        ...
    # scan.cursor can seed a new scan that resumes where this one stopped
"""

import logging
import threading
from dataclasses import dataclass
from operator import attrgetter
from typing import Any, Callable, Iterator, List, Optional

from tenacity import Retrying

logger = logging.getLogger(__name__)

FetchPage = Callable[[Optional[str], int], List[Any]]


@dataclass
class Page:
    records: List[Any]
    start_after: Optional[str]
    last_id: str


class PagedScan:
    """
    Iterate pages of records strictly after a cursor until a page comes back empty.

    Args:
        fetch_page: fetch_page(cursor, page_size) -> records ordered by id
        page_size: Upper bound on records per read
        start_after: Resume point (the last id of an earlier scan), None for the start
        retrying: tenacity policy wrapped around each read
        stop_event: Once set, no further reads are issued
        id_of: Extracts the ordering id from a record
    """

    def __init__(
        self,
        fetch_page: FetchPage,
        page_size: int,
        start_after: Optional[str] = None,
        retrying: Optional[Retrying] = None,
        stop_event: Optional[threading.Event] = None,
        id_of: Callable[[Any], str] = attrgetter('id')
    ):
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self.fetch_page = fetch_page
        self.page_size = page_size
        self.cursor = start_after
        self.retrying = retrying
        self.stop_event = stop_event
        self.id_of = id_of
        self.exhausted = False
        self.interrupted = False

    def _read(self, cursor: Optional[str]) -> List[Any]:
        if self.retrying is None:
            return self.fetch_page(cursor, self.page_size)
        return self.retrying(self.fetch_page, cursor, self.page_size)

    def __iter__(self) -> Iterator[Page]:
        while not self.exhausted:
            if self.stop_event is not None and self.stop_event.is_set():
                logger.info(f"Stop requested, scan halted after cursor {self.cursor}")
                self.interrupted = True
                return

            records = self._read(self.cursor)
            if not records:
                self.exhausted = True
                return

            page = Page(records=list(records), start_after=self.cursor, last_id=self.id_of(records[-1]))
            self.cursor = page.last_id
            yield page
