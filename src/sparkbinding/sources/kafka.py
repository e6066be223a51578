# src/sparkbinding/sources/kafka.py
"""Kafka direct-stream source.

Reads partitions directly from the brokers (no consumer-group coordinator);
the streaming runtime tracks offsets in its own checkpoint. Only the broker
list is needed to connect.
"""

from sparkbinding.contracts import ConfigError, SourceKind, StreamSourceSpec
from sparkbinding.core.config import METADATA_BROKER_LIST, TOPIC, JobConfiguration
from sparkbinding.core.logging import get_logger
from sparkbinding.sources.base import StreamSource

logger = get_logger(__name__)


def split_list(key: str, value: str) -> tuple[str, ...]:
    """Split a comma-separated property into its entries.

    Entries are not trimmed: ``"a, b"`` yields ``"a"`` and ``" b"``. Empty
    entries are rejected and repeated entries keep their first position.

    Raises:
        ConfigError: If any entry is empty
    """
    entries = value.split(",")
    if any(entry == "" for entry in entries):
        raise ConfigError(f"Property {key} '{value}' contains an empty entry", key=key, value=value)
    return tuple(dict.fromkeys(entries))


class KafkaDirectSource(StreamSource):
    """Kafka consumed through Spark's Kafka connector."""

    name = SourceKind.KAFKA

    def build(self, config: JobConfiguration) -> StreamSourceSpec:
        broker_list = config.require(METADATA_BROKER_LIST)
        brokers = split_list(METADATA_BROKER_LIST, broker_list)
        topics = split_list(TOPIC, config.topic)
        offset_reset = config.auto_offset_reset

        logger.info("Meta data broker list", brokers=broker_list)
        logger.info("Topic list", topics=config.topic)
        logger.info("Auto offset reset", policy=offset_reset if offset_reset is not None else "<broker default>")

        return StreamSourceSpec(
            kind=SourceKind.KAFKA.value,
            brokers=brokers,
            topics=topics,
            offset_reset=offset_reset,
        )
