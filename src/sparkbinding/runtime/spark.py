# src/sparkbinding/runtime/spark.py
"""Spark Structured Streaming runtime.

Runs a StreamingJob as a Kafka ``readStream`` feeding ``foreachBatch`` with
a processing-time trigger and a checkpoint location. Spark's own offset and
commit logs in that location make a restarted query continue from the last
committed micro-batch.

Get-or-create: on first start the job definition is written to ``job.json``
inside the checkpoint directory. When that file is present and valid the
job is rebuilt from it and the builder is not called, so a restarted job
keeps consuming exactly what it consumed before even if configuration
changed in the meantime.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from fsspec.core import url_to_fs

from sparkbinding.contracts import CheckpointLocation, StreamingJob, StreamingRuntimeError
from sparkbinding.core.logging import get_logger
from sparkbinding.runtime.protocols import BatchHandler, JobBuilder

if TYPE_CHECKING:
    from pyspark.sql import SparkSession
    from pyspark.sql.streaming import StreamingQuery

logger = get_logger(__name__)

JOB_DESCRIPTOR = "job.json"

# Applied before job-specific spark.* settings, which may override them
DEFAULT_SPARK_CONF: dict[str, str] = {
    "spark.serializer": "org.apache.spark.serializer.KryoSerializer",
}

SessionFactory = Callable[[StreamingJob], "SparkSession"]


def build_session(job: StreamingJob) -> SparkSession:
    """Create (or reuse) the Spark session for a job."""
    from pyspark.sql import SparkSession

    builder = SparkSession.builder.appName(job.app_name)
    for key, value in {**DEFAULT_SPARK_CONF, **job.runtime_conf}.items():
        builder = builder.config(key, value)
    return builder.getOrCreate()


def _write_descriptor(job: StreamingJob) -> None:
    """Persist the job definition next to Spark's checkpoint data."""
    fs, path = url_to_fs(job.checkpoint.child(JOB_DESCRIPTOR))
    tmp_path = f"{path}.tmp"
    with fs.open(tmp_path, "w", encoding="utf-8") as f:
        f.write(job.to_json())
    fs.mv(tmp_path, path)


class SparkStreamingContext:
    """One Spark streaming query plus the session it runs in.

    Thread-safe: start/stop transitions are guarded by a lock, and stop()
    may be called from any thread while another thread is blocked in
    await_termination().
    """

    def __init__(
        self,
        job: StreamingJob,
        batch_handler: BatchHandler,
        *,
        resumed: bool,
        session_factory: SessionFactory = build_session,
        poll_interval: float = 0.5,
    ) -> None:
        self._job = job
        self._batch_handler = batch_handler
        self._resumed = resumed
        self._session_factory = session_factory
        self._poll_interval = poll_interval
        self._lock = threading.Lock()
        self._started = False
        self._stop_requested = False
        self._force = threading.Event()
        self._session: SparkSession | None = None
        self._query: StreamingQuery | None = None

    @property
    def job(self) -> StreamingJob:
        return self._job

    @property
    def resumed(self) -> bool:
        return self._resumed

    def start(self) -> None:
        """Start the streaming query.

        Raises:
            StreamingRuntimeError: If already started or Spark fails to start
        """
        with self._lock:
            if self._started:
                raise StreamingRuntimeError(f"Streaming job at {self._job.checkpoint} was already started")
            self._started = True

        job = self._job
        try:
            session = self._session_factory(job)
            self._session = session

            reader = session.readStream.format(job.source.format)
            for key, value in job.source.reader_options().items():
                reader = reader.option(key, value)

            writer = (
                reader.load()
                .writeStream.foreachBatch(self._batch_handler)
                .trigger(processingTime=job.trigger_interval)
                .option("checkpointLocation", job.checkpoint.url)
            )
            self._query = writer.start()
        except Exception as e:
            raise StreamingRuntimeError(f"Could not start streaming job at {job.checkpoint}: {e}") from e

        if not self._resumed:
            try:
                _write_descriptor(job)
            except OSError as e:
                raise StreamingRuntimeError(f"Could not persist job definition at {job.checkpoint}: {e}") from e

        logger.info(
            "Streaming query started",
            checkpoint=job.checkpoint.url,
            resumed=self._resumed,
            trigger=job.trigger_interval,
        )

    def await_termination(self, timeout: float | None = None) -> bool:
        """Block until the query stops.

        Raises:
            StreamingRuntimeError: If the query terminated with a failure
        """
        from py4j.protocol import Py4JError
        from pyspark.errors import StreamingQueryException

        query = self._require_query()
        try:
            if timeout is None:
                query.awaitTermination()
                return True
            if timeout <= 0:
                return not query.isActive
            return bool(query.awaitTermination(timeout))
        except StreamingQueryException as e:
            raise StreamingRuntimeError(f"Streaming job at {self._job.checkpoint} failed: {e}") from e
        except Py4JError as e:
            # The gateway may drop the blocked call while the session shuts down
            if self._stop_requested:
                return True
            raise StreamingRuntimeError(f"Lost connection to Spark while awaiting {self._job.checkpoint}: {e}") from e

    def stop(self, *, graceful: bool = True) -> None:
        """Stop the query and the Spark session.

        A graceful stop first waits, bounded by the job's graceful stop
        timeout, for the micro-batch in flight to finish and commit. A
        forced stop arriving during that wait ends it and stops the query
        at once. Any other repeated stop is a no-op.
        """
        with self._lock:
            escalated = self._stop_requested
            if escalated and (graceful or self._force.is_set()):
                return
            self._stop_requested = True
            if not graceful:
                self._force.set()
            query = self._query
            session = self._session

        if escalated:
            # The stop already in flight releases the session
            if query is not None:
                try:
                    query.stop()
                except Exception as e:
                    raise StreamingRuntimeError(f"Could not stop streaming job at {self._job.checkpoint}: {e}") from e
            logger.info("Streaming query stop forced", checkpoint=self._job.checkpoint.url)
            return

        try:
            if query is not None:
                if graceful:
                    self._wait_for_idle(query)
                query.stop()
        except Exception as e:
            raise StreamingRuntimeError(f"Could not stop streaming job at {self._job.checkpoint}: {e}") from e
        finally:
            if session is not None:
                session.stop()

        logger.info("Streaming query stopped", checkpoint=self._job.checkpoint.url, graceful=graceful)

    def _wait_for_idle(self, query: Any) -> None:
        deadline = time.monotonic() + self._job.graceful_stop_timeout_ms / 1000
        while not self._force.is_set() and query.isActive and query.status["isTriggerActive"]:
            if time.monotonic() >= deadline:
                logger.warning(
                    "Graceful stop timed out waiting for micro-batch",
                    checkpoint=self._job.checkpoint.url,
                    timeout_ms=self._job.graceful_stop_timeout_ms,
                )
                return
            self._force.wait(self._poll_interval)

    def _require_query(self) -> Any:
        if self._query is None:
            raise StreamingRuntimeError(f"Streaming job at {self._job.checkpoint} has not been started")
        return self._query


class SparkStreamingRuntime:
    """get-or-create for Spark streaming jobs keyed by checkpoint location.

    Args:
        batch_handler: Called with each micro-batch DataFrame and its id
        create_on_error: Build a new job instead of failing when the
            persisted job definition cannot be read
        session_factory: Creates the Spark session for a job
    """

    def __init__(
        self,
        batch_handler: BatchHandler,
        *,
        create_on_error: bool = False,
        session_factory: SessionFactory = build_session,
    ) -> None:
        self._batch_handler = batch_handler
        self._create_on_error = create_on_error
        self._session_factory = session_factory

    def get_or_create(self, checkpoint: CheckpointLocation, create: JobBuilder) -> SparkStreamingContext:
        persisted = self._load(checkpoint)
        if persisted is not None:
            logger.info("Resuming streaming job from checkpoint", checkpoint=checkpoint.url)
            # The descriptor was found at this location, so it is authoritative
            job = replace(persisted, checkpoint=checkpoint)
            return self._context(job, resumed=True)

        logger.info("No checkpoint state found, creating streaming job", checkpoint=checkpoint.url)
        return self._context(create(), resumed=False)

    def _context(self, job: StreamingJob, *, resumed: bool) -> SparkStreamingContext:
        return SparkStreamingContext(
            job,
            self._batch_handler,
            resumed=resumed,
            session_factory=self._session_factory,
        )

    def _load(self, checkpoint: CheckpointLocation) -> StreamingJob | None:
        descriptor = checkpoint.child(JOB_DESCRIPTOR)
        fs, path = url_to_fs(descriptor)
        if not fs.exists(path):
            return None
        try:
            with fs.open(path, "r", encoding="utf-8") as f:
                return StreamingJob.from_json(f.read())
        except (OSError, ValueError, KeyError, TypeError) as e:
            if self._create_on_error:
                logger.warning("Discarding unreadable checkpoint state", checkpoint=checkpoint.url, error=str(e))
                return None
            raise StreamingRuntimeError(f"Checkpoint state at {descriptor} is unreadable: {e}") from e
