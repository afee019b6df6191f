"""Retry policy for record store reads and page commits."""

import logging
from typing import Callable, Optional

from sqlalchemy.exc import InterfaceError, OperationalError, TimeoutError as PoolTimeoutError
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from core.config_loader import BatchConfig
from core.errors import TransientStoreError

logger = logging.getLogger(__name__)

# Failures worth another attempt; anything else propagates immediately
TRANSIENT_STORE_ERRORS = (
    TransientStoreError,
    OperationalError,
    InterfaceError,
    PoolTimeoutError,
)


def store_retrying(config: BatchConfig, sleep: Optional[Callable[[float], None]] = None) -> Retrying:
    """
    Build the tenacity Retrying used around every page read and page commit.

    After `max_attempts` the last exception is re-raised unchanged so the
    caller can decide between skipping the page and aborting the run.
    """
    kwargs = {}
    if sleep is not None:
        kwargs['sleep'] = sleep
    return Retrying(
        retry=retry_if_exception_type(TRANSIENT_STORE_ERRORS),
        stop=stop_after_attempt(config.max_attempts),
        wait=wait_exponential(
            multiplier=config.backoff_seconds,
            max=config.backoff_max_seconds
        ),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
        **kwargs,
    )
