"""Applying parsed batches and tracking their jobs."""

from .applier import apply_batch
from .jobs import BatchRunner, JobTracker

__all__ = [
    "apply_batch",
    "BatchRunner",
    "JobTracker",
]
