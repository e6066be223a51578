"""Broker consumption source contract."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class StreamSourceSpec:
    """What a streaming job consumes and how it starts reading.

    Built once per job creation by a source plugin. Topics keep the order
    in which they were configured, with duplicates removed.

    Attributes:
        kind: Source technology name (e.g. "kafka")
        brokers: Broker endpoints ("host:port")
        topics: Topic names to subscribe to
        offset_reset: Starting position when no committed offset exists.
            None means the broker/runtime default applies.
    """

    kind: str
    brokers: tuple[str, ...]
    topics: tuple[str, ...]
    offset_reset: str | None = None

    def __post_init__(self) -> None:
        if not self.brokers:
            raise ValueError("StreamSourceSpec requires at least one broker")
        if not self.topics:
            raise ValueError("StreamSourceSpec requires at least one topic")

    @property
    def format(self) -> str:
        """Spark ``readStream`` format name for this source."""
        return self.kind

    def reader_options(self) -> dict[str, str]:
        """Options passed to Spark's ``readStream``, named as the Kafka connector expects."""
        options = {
            "kafka.bootstrap.servers": ",".join(self.brokers),
            "subscribe": ",".join(self.topics),
        }
        if self.offset_reset is not None:
            options["startingOffsets"] = self.offset_reset
        return options

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "brokers": list(self.brokers),
            "topics": list(self.topics),
            "offset_reset": self.offset_reset,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StreamSourceSpec:
        return cls(
            kind=data["kind"],
            brokers=tuple(data["brokers"]),
            topics=tuple(data["topics"]),
            offset_reset=data["offset_reset"],
        )
