# src/sparkbinding/core/checkpoint.py
"""Checkpoint directory resolution and provisioning.

Every streaming job keeps its runtime checkpoint in a directory derived
only from its identity:

    <root>/.<namespace>/<sdc.id>/<url-encoded topic>/<cluster.pipeline.name>

The same (job id, topic, pipeline name) always maps to the same directory,
which is how a restarted job finds the state of its previous incarnation.
The topic is percent-encoded because topic lists contain commas and topic
names may contain characters that are not safe in a path.

Filesystem access goes through fsspec, so the root may be a local path or
any fsspec URL (hdfs://, s3a://, memory://).
"""

from __future__ import annotations

from pathlib import Path
from urllib.parse import quote_plus, unquote_plus

import fsspec
from fsspec.core import url_to_fs

from sparkbinding.contracts import CheckpointLocation, StorageError
from sparkbinding.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_NAMESPACE = "spark-streaming"


def encode_topic(topic: str) -> str:
    """Percent-encode a topic list into a single path segment.

    Uses UTF-8 form encoding with no safe characters: ``,`` becomes ``%2C``,
    ``/`` becomes ``%2F`` and spaces become ``+``. Unlike Java's URLEncoder,
    ``~`` is kept and ``*`` becomes ``%2A``. A result of ``.`` or ``..``
    would alias a parent directory, so its dots are encoded too.
    """
    encoded = quote_plus(topic, safe="", encoding="utf-8")
    if encoded in (".", ".."):
        encoded = encoded.replace(".", "%2E")
    return encoded


def decode_topic(segment: str) -> str:
    """Inverse of encode_topic."""
    return unquote_plus(segment, encoding="utf-8")


def default_root(default_fs: str | None = None) -> str:
    """Filesystem root for checkpoints.

    Args:
        default_fs: Configured ``fs.defaultFS`` (URL or path), if any

    Returns:
        The configured root, or the local user's home directory
    """
    if default_fs:
        return default_fs
    return str(Path.home())


class CheckpointLocator:
    """Derives and provisions per-job checkpoint directories.

    Provisioning is idempotent: an existing directory is left untouched and
    concurrent callers targeting the same path both succeed. Nothing under
    the directory is ever written or deleted here.

    Example:
        locator = CheckpointLocator()
        location = locator.resolve("hdfs://nn:8020/user/etl", "sdc-1", "orders,payments", "p1")
        location.url  # hdfs://nn:8020/user/etl/.spark-streaming/sdc-1/orders%2Cpayments/p1
    """

    def __init__(self, namespace: str = DEFAULT_NAMESPACE) -> None:
        if not namespace or "/" in namespace:
            raise ValueError(f"Invalid checkpoint namespace: {namespace!r}")
        self._namespace = namespace

    @property
    def namespace(self) -> str:
        return self._namespace

    def locate(self, root_dir: str, job_id: str, topic: str, pipeline_name: str) -> CheckpointLocation:
        """Compute the checkpoint location without touching the filesystem."""
        return CheckpointLocation(
            root=root_dir,
            namespace=self._namespace,
            job_id=job_id,
            topic_segment=encode_topic(topic),
            pipeline_name=pipeline_name,
        )

    def resolve(self, root_dir: str, job_id: str, topic: str, pipeline_name: str) -> CheckpointLocation:
        """Compute the checkpoint location and make sure its directory exists.

        Args:
            root_dir: Filesystem root (local path or fsspec URL)
            job_id: Data collector identity
            topic: Raw (unencoded) topic list
            pipeline_name: Pipeline identity, used as the leaf directory

        Returns:
            The resolved CheckpointLocation

        Raises:
            StorageError: If the directory cannot be created, or the path
                exists but is not a readable directory
        """
        location = self.locate(root_dir, job_id, topic, pipeline_name)
        self._provision(location)
        return location

    def _provision(self, location: CheckpointLocation) -> None:
        url = location.url
        try:
            fs, path = url_to_fs(url)
        except (ValueError, ImportError) as e:
            raise StorageError(f"Unsupported checkpoint filesystem for {url}: {e}", path=url) from e

        logger.info("Resolving checkpoint directory", filesystem=_protocol_name(fs), checkpoint=url)

        try:
            fs.makedirs(path, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Could not create checkpoint path: {url}: {e}", path=url) from e

        if not fs.isdir(path):
            raise StorageError(f"Could not create checkpoint path: {url} is not a directory", path=url)

        # Listing proves the directory is readable, not just present
        try:
            fs.ls(path, detail=False)
        except OSError as e:
            raise StorageError(f"Checkpoint path is not readable: {url}: {e}", path=url) from e


def _protocol_name(fs: fsspec.AbstractFileSystem) -> str:
    protocol = fs.protocol
    return protocol if isinstance(protocol, str) else protocol[0]
