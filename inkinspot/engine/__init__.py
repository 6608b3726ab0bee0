"""Engine Layer - Core Orchestration and Deadline Management

This module provides the core engine layer for the search service, implementing:
- SearchEngine: Main entry point for search execution (vector → image lookup)
- Budget: Cancellable time budgets and deadline composition
- Models: Image vectors, collections, timeout policy and store contracts
- Exceptions: Tagged SearchError with ErrorKind classification
"""

from .budget import (
    Budget,
    derive_budget,
    tight_budget,
    with_cancel,
    with_deadline,
    with_timeout,
)
from .exceptions import ErrorKind, SearchError, classify
from .models import (
    ImageCollection,
    ImageStore,
    ImageVector,
    LabelSet,
    TimeoutPolicy,
    VectorStore,
)
from .orchestrator import SearchEngine

__all__ = [
    "SearchEngine",
    "Budget",
    "derive_budget",
    "tight_budget",
    "with_cancel",
    "with_deadline",
    "with_timeout",
    "ImageCollection",
    "ImageVector",
    "ImageStore",
    "VectorStore",
    "LabelSet",
    "TimeoutPolicy",
    # Exceptions
    "ErrorKind",
    "SearchError",
    "classify",
]
