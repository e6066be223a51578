"""Checkpoint location contract.

A CheckpointLocation is a pure value: it is computed from configuration and
never mutated. Its directory is provisioned by CheckpointLocator, while the
files inside it belong to the streaming runtime.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CheckpointLocation:
    """Resolved per-job checkpoint directory on a shared filesystem.

    Layout: ``<root>/.<namespace>/<job_id>/<topic_segment>/<pipeline_name>``

    Attributes:
        root: Filesystem root URL or path (e.g. ``hdfs://nn:8020/user/etl``)
        namespace: Hidden directory name under root, without the leading dot
        job_id: Data collector identity (``sdc.id``)
        topic_segment: Percent-encoded topic list
        pipeline_name: Pipeline identity (``cluster.pipeline.name``)
    """

    root: str
    namespace: str
    job_id: str
    topic_segment: str
    pipeline_name: str

    @property
    def parent_url(self) -> str:
        """Directory that holds every pipeline checkpoint for this topic."""
        base = self.root if self.root.endswith("/") else f"{self.root}/"
        return f"{base}.{self.namespace}/{self.job_id}/{self.topic_segment}"

    @property
    def url(self) -> str:
        """Full checkpoint directory, as handed to the streaming runtime."""
        return f"{self.parent_url}/{self.pipeline_name}"

    def child(self, name: str) -> str:
        """URL of a file or directory directly inside the checkpoint."""
        return f"{self.url}/{name}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "root": self.root,
            "namespace": self.namespace,
            "job_id": self.job_id,
            "topic_segment": self.topic_segment,
            "pipeline_name": self.pipeline_name,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CheckpointLocation:
        return cls(
            root=data["root"],
            namespace=data["namespace"],
            job_id=data["job_id"],
            topic_segment=data["topic_segment"],
            pipeline_name=data["pipeline_name"],
        )

    def __str__(self) -> str:
        return self.url
