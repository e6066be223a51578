"""Example batch handler: logs how many distinct payloads each micro-batch carries."""

from typing import Any

import structlog

logger = structlog.get_logger(__name__)


def count_orders(batch: Any, batch_id: int) -> None:
    distinct = batch.selectExpr("CAST(value AS STRING) AS value").distinct().count()
    logger.info("Orders batch", batch_id=batch_id, distinct_values=distinct)
