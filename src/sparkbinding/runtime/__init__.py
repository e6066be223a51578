"""Streaming runtime bindings.

The lifecycle controller depends only on the protocols; SparkStreamingRuntime
is the production implementation. PySpark is imported lazily, so importing
this package does not start a JVM.
"""

from sparkbinding.runtime.protocols import BatchHandler, JobBuilder, StreamingContext, StreamingRuntime
from sparkbinding.runtime.spark import JOB_DESCRIPTOR, SparkStreamingContext, SparkStreamingRuntime

__all__ = [
    "JOB_DESCRIPTOR",
    "BatchHandler",
    "JobBuilder",
    "SparkStreamingContext",
    "SparkStreamingRuntime",
    "StreamingContext",
    "StreamingRuntime",
]
