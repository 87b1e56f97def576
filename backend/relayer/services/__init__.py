"""Business services."""

from relayer.services.finalizer import Finalizer
from relayer.services.scanner import Scanner
from relayer.services.scheduler import PassSummary, Scheduler

__all__ = [
    "Scanner",
    "Finalizer",
    "Scheduler",
    "PassSummary",
]
