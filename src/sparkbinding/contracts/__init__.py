"""Shared contracts for cross-boundary data types.

This package is a LEAF MODULE: it imports nothing from core, sources,
runtime or engine, and pulls in no third-party dependencies.

Import patterns:
    from sparkbinding.contracts import CheckpointLocation, ConfigError, JobState
"""

from sparkbinding.contracts.checkpoint import CheckpointLocation
from sparkbinding.contracts.enums import JobState, SourceKind
from sparkbinding.contracts.errors import (
    BindingError,
    ConfigError,
    JobStateError,
    StorageError,
    StreamingRuntimeError,
)
from sparkbinding.contracts.job import StreamingJob
from sparkbinding.contracts.results import Err, Ok, Result
from sparkbinding.contracts.source import StreamSourceSpec

__all__ = [
    "BindingError",
    "CheckpointLocation",
    "ConfigError",
    "Err",
    "JobState",
    "JobStateError",
    "Ok",
    "Result",
    "SourceKind",
    "StorageError",
    "StreamSourceSpec",
    "StreamingJob",
    "StreamingRuntimeError",
]
