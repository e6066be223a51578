# src/sparkbinding/engine/controller.py
"""Lifecycle controller for a checkpointed streaming job.

State machine:

    UNINITIALIZED --init()--> RUNNING --close()/failure--> STOPPED (terminal)

init() resolves configuration, provisions the checkpoint directory and asks
the runtime to get-or-create the job keyed by that directory. Every setup
failure propagates before anything is started.

Stopping is stop-once: the first caller performs the stop, concurrent
callers wait for it to finish, later callers return immediately. The
controller does not install signal handlers itself; the host wires them up
with sparkbinding.engine.shutdown.shutdown_handler(controller).
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from functools import partial
from types import TracebackType

from sparkbinding.contracts import (
    CheckpointLocation,
    JobState,
    JobStateError,
    StreamingJob,
    StreamingRuntimeError,
)
from sparkbinding.contracts.job import DEFAULT_APP_NAME, DEFAULT_GRACEFUL_STOP_TIMEOUT_MS
from sparkbinding.core.checkpoint import CheckpointLocator, default_root
from sparkbinding.core.config import (
    GRACEFUL_STOP_TIMEOUT,
    JobConfiguration,
    mask_secrets,
    parse_duration,
    resolve,
)
from sparkbinding.core.logging import get_logger
from sparkbinding.runtime.protocols import StreamingContext, StreamingRuntime
from sparkbinding.sources import StreamSourceFactory

logger = get_logger(__name__)

SPARK_APP_NAME = "spark.app.name"


def build_job(config: JobConfiguration, checkpoint: CheckpointLocation, sources: StreamSourceFactory) -> StreamingJob:
    """Build a new streaming job from configuration.

    Only called by the runtime when no checkpoint state exists. Reads
    nothing but its arguments, which are all immutable.

    Raises:
        ConfigError: If the source technology is unsupported or its
            configuration is invalid
    """
    source = sources.build(config.source_name, config)
    graceful_stop = config.get(GRACEFUL_STOP_TIMEOUT)
    return StreamingJob(
        app_name=config.get(SPARK_APP_NAME, DEFAULT_APP_NAME),
        batch_interval_ms=parse_duration(config.max_wait_time),
        checkpoint=checkpoint,
        source=source,
        runtime_conf=config.spark_conf(),
        graceful_stop_timeout_ms=(
            parse_duration(graceful_stop, key=GRACEFUL_STOP_TIMEOUT) if graceful_stop is not None else DEFAULT_GRACEFUL_STOP_TIMEOUT_MS
        ),
    )


class JobLifecycleController:
    """Owns the single streaming job of this process.

    Example:
        controller = JobLifecycleController(properties, SparkStreamingRuntime(handler))
        with shutdown_handler(controller):
            controller.init()
            controller.await_termination()
        controller.close()
    """

    def __init__(
        self,
        properties: Mapping[str, str],
        runtime: StreamingRuntime,
        *,
        sources: StreamSourceFactory | None = None,
        locator: CheckpointLocator | None = None,
    ) -> None:
        self._properties = dict(properties)
        self._runtime = runtime
        self._sources = sources if sources is not None else StreamSourceFactory()
        self._locator = locator if locator is not None else CheckpointLocator()

        self._lock = threading.Lock()
        self._stopped = threading.Event()
        self._stop_claimed = False
        self._forced = False
        self._state = JobState.UNINITIALIZED
        self._context: StreamingContext | None = None
        self._checkpoint: CheckpointLocation | None = None
        self._resumed = False

    @property
    def state(self) -> JobState:
        return self._state

    @property
    def checkpoint(self) -> CheckpointLocation | None:
        """Resolved checkpoint location, once init() has got that far."""
        return self._checkpoint

    @property
    def resumed(self) -> bool:
        """True if the running job was rebuilt from checkpoint state."""
        return self._resumed

    def init(self) -> None:
        """Create or resume the streaming job and start it.

        Calling init() on a running controller is a no-op.

        Raises:
            ConfigError: Missing, blank or invalid configuration
            StorageError: Checkpoint directory cannot be provisioned
            StreamingRuntimeError: Runtime failed to restore or start the job
            JobStateError: The controller was already stopped
        """
        with self._lock:
            if self._state is JobState.RUNNING:
                logger.warning("Streaming job already running, ignoring init", checkpoint=str(self._checkpoint))
                return
            if self._state is JobState.STOPPED:
                raise JobStateError("Streaming job was stopped; a stopped controller cannot be restarted")

            config = resolve(self._properties).unwrap()
            for key, value in sorted(mask_secrets(config).items()):
                logger.debug("PROPERTY", key=key, value=value)
            # Validated up front even on resume, where the persisted interval wins
            parse_duration(config.max_wait_time)

            root = default_root(config.default_fs)
            logger.info("Default FS root", root=root)
            checkpoint = self._locator.resolve(root, config.sdc_id, config.topic, config.pipeline_name)
            self._checkpoint = checkpoint

            builder = partial(build_job, config, checkpoint, self._sources)
            context = self._runtime.get_or_create(checkpoint, builder)

            try:
                context.start()
            except BaseException:
                self._state = JobState.STOPPED
                self._stop_claimed = True
                self._stopped.set()
                self._abandon(context)
                raise

            self._context = context
            self._resumed = context.resumed
            self._state = JobState.RUNNING

        logger.info("Streaming job running", checkpoint=checkpoint.url, resumed=context.resumed)

    def await_termination(self, timeout: float | None = None) -> bool:
        """Block until the job is stopped, by close(), a signal or a failure.

        Args:
            timeout: Seconds to wait, or None to wait indefinitely

        Returns:
            True once stopped, False if the timeout elapsed first

        Raises:
            JobStateError: init() has not been called
            StreamingRuntimeError: The job terminated with a failure
        """
        with self._lock:
            state = self._state
            context = self._context
        if state is JobState.UNINITIALIZED:
            raise JobStateError("Streaming job has not been initialized")
        if context is None:
            self._stopped.wait(timeout)
            return self._stopped.is_set()

        try:
            terminated = context.await_termination(timeout)
        except StreamingRuntimeError:
            logger.error("Streaming job failed", checkpoint=context.job.checkpoint.url, exc_info=True)
            self.stop(graceful=False)
            raise

        if terminated:
            # Either a stop is in flight (wait for it) or the query ended by itself
            self.stop(graceful=True)
        return terminated

    def stop(self, *, graceful: bool = True) -> bool:
        """Stop the job exactly once.

        Safe to call from any thread, any number of times. Concurrent
        callers block until the one performing the stop has finished. A
        non-graceful call made while a graceful stop is waiting on the
        in-flight micro-batch escalates it to a forced stop.

        Returns:
            True if this call performed the stop
        """
        with self._lock:
            if self._state is JobState.UNINITIALIZED:
                return False
            claimed = not self._stop_claimed
            self._stop_claimed = True
            context = self._context
            escalate = not claimed and not graceful and not self._forced
            if not graceful:
                self._forced = True

        if not claimed:
            if escalate and context is not None and not self._stopped.is_set():
                self._force(context)
            self._stopped.wait()
            return False

        logger.debug("Stopping streaming job", graceful=graceful)
        try:
            if context is not None:
                context.stop(graceful=graceful)
        finally:
            with self._lock:
                self._state = JobState.STOPPED
                self._context = None
            self._stopped.set()
        logger.info("Streaming job stopped", checkpoint=str(self._checkpoint), graceful=graceful)
        return True

    def close(self) -> bool:
        """Gracefully stop the job. No-op if never initialized or already stopped."""
        return self.stop(graceful=True)

    def __enter__(self) -> JobLifecycleController:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    @staticmethod
    def _abandon(context: StreamingContext) -> None:
        """Release a context whose start failed, keeping the start error primary."""
        try:
            context.stop(graceful=False)
        except Exception as e:
            logger.warning("Could not release streaming job after failed start", error=str(e))

    @staticmethod
    def _force(context: StreamingContext) -> None:
        """Cut short a graceful stop that is still draining."""
        logger.warning("Forcing stop of streaming job", checkpoint=context.job.checkpoint.url)
        try:
            context.stop(graceful=False)
        except StreamingRuntimeError as e:
            # The stop already in flight still releases the job
            logger.warning("Could not force streaming job stop", error=str(e))
