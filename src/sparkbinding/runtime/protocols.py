# src/sparkbinding/runtime/protocols.py
"""Protocols for the streaming runtime the lifecycle controller drives.

The runtime owns execution: scheduling micro-batches, fault tolerance and
the contents of the checkpoint directory. The controller only asks it to
get-or-create a job for a checkpoint location and to start, await and stop
that job.
"""

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from sparkbinding.contracts import CheckpointLocation, StreamingJob

# Per-batch callback: (micro-batch DataFrame, batch id) -> None
BatchHandler = Callable[[Any, int], None]

# Explicit builder for a new job; only called when no checkpoint state exists
JobBuilder = Callable[[], StreamingJob]


@runtime_checkable
class StreamingContext(Protocol):
    """Handle on one streaming execution.

    Lifecycle:
    1. start() - exactly once
    2. await_termination() - any number of times, from any thread
    3. stop() - graceful stop waits for the in-flight micro-batch
    """

    @property
    def job(self) -> StreamingJob:
        """The execution graph this context runs."""
        ...

    @property
    def resumed(self) -> bool:
        """True if the job was rebuilt from checkpoint state."""
        ...

    def start(self) -> None:
        """Start execution.

        Raises:
            StreamingRuntimeError: If already started or the runtime fails
        """
        ...

    def await_termination(self, timeout: float | None = None) -> bool:
        """Block until execution stops.

        Args:
            timeout: Seconds to wait, or None to wait indefinitely

        Returns:
            True if execution stopped, False if the timeout elapsed first

        Raises:
            StreamingRuntimeError: If execution terminated with a failure
        """
        ...

    def stop(self, *, graceful: bool = True) -> None:
        """Stop execution and release runtime resources.

        A non-graceful call made while a graceful stop is still draining
        must cut that stop short.
        """
        ...


@runtime_checkable
class StreamingRuntime(Protocol):
    """Creates or resumes streaming executions keyed by checkpoint location."""

    def get_or_create(self, checkpoint: CheckpointLocation, create: JobBuilder) -> StreamingContext:
        """Resume the job checkpointed at ``checkpoint`` or build a new one.

        If valid checkpoint state exists, the previous execution graph is
        rebuilt from it and ``create`` is never called. Otherwise ``create``
        is called exactly once.

        Raises:
            StreamingRuntimeError: If checkpoint state exists but is unusable
        """
        ...
