"""Job lifecycle: controller, shutdown wiring and batch handlers."""

from sparkbinding.engine.controller import JobLifecycleController, build_job
from sparkbinding.engine.handlers import load_batch_handler, log_batch
from sparkbinding.engine.shutdown import ShutdownRequest, shutdown_handler

__all__ = [
    "JobLifecycleController",
    "ShutdownRequest",
    "build_job",
    "load_batch_handler",
    "log_batch",
    "shutdown_handler",
]
