"""Pipeline stages orchestrating fetch → dedup filter → chunked commit."""

from .cancellation import CancellationToken
from .committer import BatchCommitter, CommitReport
from .filter import ImportOutcome, filter_candidates, incoming_titles
from .orchestrator import ImportOrchestrator

__all__ = [
    "BatchCommitter",
    "CancellationToken",
    "CommitReport",
    "ImportOrchestrator",
    "ImportOutcome",
    "filter_candidates",
    "incoming_titles",
]
