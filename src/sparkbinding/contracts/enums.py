"""Status codes and kinds used across subsystem boundaries."""

from enum import StrEnum


class JobState(StrEnum):
    """Lifecycle state of a streaming job owned by the controller.

    STOPPED is terminal: a stopped controller is never restarted.
    """

    UNINITIALIZED = "uninitialized"
    RUNNING = "running"
    STOPPED = "stopped"


class SourceKind(StrEnum):
    """Broker technologies a streaming job can consume from.

    Values are matched case-insensitively against ``cluster.source.name``.
    """

    KAFKA = "kafka"
