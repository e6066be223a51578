# src/sparkbinding/engine/handlers.py
"""Per-batch callbacks handed to the streaming runtime.

The pipeline that processes records is outside this package: the host
names it as ``module:attribute`` and it is called once per micro-batch with
the batch DataFrame and the batch id.
"""

import importlib
from typing import Any

from sparkbinding.contracts import ConfigError
from sparkbinding.core.logging import get_logger
from sparkbinding.runtime.protocols import BatchHandler

logger = get_logger(__name__)


def log_batch(batch: Any, batch_id: int) -> None:
    """Default handler: log the size of each micro-batch and drop it."""
    logger.info("Micro-batch received", batch_id=batch_id, records=batch.count())


def load_batch_handler(reference: str) -> BatchHandler:
    """Import a batch handler from a ``module:attribute`` reference.

    Raises:
        ConfigError: If the reference is malformed, cannot be imported, or
            does not name a callable
    """
    module_name, sep, attr_path = reference.partition(":")
    if not sep or not module_name or not attr_path:
        raise ConfigError(f"Invalid batch handler '{reference}' : expected module:attribute", value=reference)

    try:
        target: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigError(f"Invalid batch handler '{reference}' : {e}", value=reference) from e

    for attr in attr_path.split("."):
        try:
            target = getattr(target, attr)
        except AttributeError as e:
            raise ConfigError(f"Invalid batch handler '{reference}' : {e}", value=reference) from e

    if not callable(target):
        raise ConfigError(f"Invalid batch handler '{reference}' : {type(target).__name__} is not callable", value=reference)
    handler: BatchHandler = target
    return handler
