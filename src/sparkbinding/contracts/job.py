"""Streaming job definition contract.

A StreamingJob is the execution graph handed to the streaming runtime: a
broker source, a micro-batch interval and a checkpoint location. It is
plain data so the runtime can persist it next to its checkpoint and rebuild
the same graph on restart without consulting current configuration.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from sparkbinding.contracts.checkpoint import CheckpointLocation
from sparkbinding.contracts.source import StreamSourceSpec

DEFAULT_APP_NAME = "Spark Streaming Binding"
DEFAULT_GRACEFUL_STOP_TIMEOUT_MS = 60_000


@dataclass(frozen=True)
class StreamingJob:
    """Execution graph for one checkpointed streaming job.

    Attributes:
        app_name: Spark application name
        batch_interval_ms: Micro-batch trigger interval in milliseconds
        checkpoint: Where the runtime keeps offsets and commit logs
        source: Broker consumption source
        runtime_conf: Extra runtime settings (``spark.*`` keys)
        graceful_stop_timeout_ms: Upper bound on waiting for the in-flight
            micro-batch during a graceful stop
    """

    FORMAT_VERSION = 1

    app_name: str
    batch_interval_ms: int
    checkpoint: CheckpointLocation
    source: StreamSourceSpec
    runtime_conf: MappingProxyType[str, str] = field(default_factory=lambda: MappingProxyType({}))
    graceful_stop_timeout_ms: int = DEFAULT_GRACEFUL_STOP_TIMEOUT_MS

    def __post_init__(self) -> None:
        if self.batch_interval_ms < 0:
            raise ValueError(f"batch_interval_ms must be non-negative, got {self.batch_interval_ms}")
        if not isinstance(self.runtime_conf, MappingProxyType):
            object.__setattr__(self, "runtime_conf", MappingProxyType(dict(self.runtime_conf)))

    @property
    def trigger_interval(self) -> str:
        """Interval string for Spark's ``processingTime`` trigger."""
        return f"{self.batch_interval_ms} milliseconds"

    def to_dict(self) -> dict[str, Any]:
        return {
            "format_version": self.FORMAT_VERSION,
            "app_name": self.app_name,
            "batch_interval_ms": self.batch_interval_ms,
            "checkpoint": self.checkpoint.to_dict(),
            "source": self.source.to_dict(),
            "runtime_conf": dict(self.runtime_conf),
            "graceful_stop_timeout_ms": self.graceful_stop_timeout_ms,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True, indent=2)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StreamingJob:
        """Rebuild a job from its persisted form.

        Raises:
            ValueError: If the format version is not understood
            KeyError: If a required field is missing
        """
        version = data["format_version"]
        if version != cls.FORMAT_VERSION:
            raise ValueError(f"Unsupported job format version {version!r} (expected {cls.FORMAT_VERSION})")
        return cls(
            app_name=data["app_name"],
            batch_interval_ms=int(data["batch_interval_ms"]),
            checkpoint=CheckpointLocation.from_dict(data["checkpoint"]),
            source=StreamSourceSpec.from_dict(data["source"]),
            runtime_conf=MappingProxyType(dict(data["runtime_conf"])),
            graceful_stop_timeout_ms=int(data["graceful_stop_timeout_ms"]),
        )

    @classmethod
    def from_json(cls, text: str) -> StreamingJob:
        return cls.from_dict(json.loads(text))
