"""pkgsearch - fuzzy-search the Go module index from the terminal."""

__version__ = "0.3.0"

from .config import SearchConfig, configure_logging
from .exceptions import (
    ConfigError,
    DecodeError,
    PkgSearchError,
    SinkError,
    SinkExecutionError,
    SinkUnavailable,
    TransportError,
)
from .matcher import fuzzy_match, match
from .models import Entry, IndexRecord, Match, Phase
from .state import SelectionState, initial_state, update
from .store import EntryStore

__all__ = [
    "__version__",
    # Config
    "SearchConfig",
    "configure_logging",
    # Errors
    "PkgSearchError",
    "ConfigError",
    "TransportError",
    "DecodeError",
    "SinkError",
    "SinkUnavailable",
    "SinkExecutionError",
    # Core
    "Entry",
    "IndexRecord",
    "Match",
    "Phase",
    "EntryStore",
    "fuzzy_match",
    "match",
    "SelectionState",
    "initial_state",
    "update",
]
