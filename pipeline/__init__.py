"""Scheduled jobs of the creator scoring engine."""

from .models import JobRunSummary
from .pagination import Page, PagedScan
from .recompute import RecomputeJob
from .streaks import StreakResetJob

__all__ = ['JobRunSummary', 'Page', 'PagedScan', 'RecomputeJob', 'StreakResetJob']
