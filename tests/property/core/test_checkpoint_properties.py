# tests/property/core/test_checkpoint_properties.py
"""Property-based tests for checkpoint path derivation.

A restarted job finds its previous state only through the directory its
identity maps to, so derivation must be deterministic, must keep distinct
identities apart, and must always produce exactly one path segment per
component.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from hypothesis import given
from hypothesis import strategies as st

from sparkbinding.core.checkpoint import CheckpointLocator, decode_topic, encode_topic
from tests.property.conftest import identities, list_entries, topics
from tests.property.settings import DETERMINISM_SETTINGS, SLOW_SETTINGS, STANDARD_SETTINGS


class TestTopicEncodingProperties:
    @given(topic=topics)
    @DETERMINISM_SETTINGS
    def test_encoded_topic_is_one_segment(self, topic: str) -> None:
        segment = encode_topic(topic)

        assert "/" not in segment
        assert "," not in segment
        assert segment not in ("", ".", "..")

    @given(topic=topics)
    @STANDARD_SETTINGS
    def test_decoding_recovers_topic(self, topic: str) -> None:
        assert decode_topic(encode_topic(topic)) == topic

    @given(first=topics, second=topics)
    @STANDARD_SETTINGS
    def test_distinct_topics_distinct_segments(self, first: str, second: str) -> None:
        if first != second:
            assert encode_topic(first) != encode_topic(second)


class TestLocateProperties:
    @given(root=st.sampled_from(["/data", "/data/", "hdfs://nn:8020/user/etl", "memory://"]), job_id=identities, topic=topics, pipeline=identities)
    @DETERMINISM_SETTINGS
    def test_locate_is_deterministic(self, root: str, job_id: str, topic: str, pipeline: str) -> None:
        first = CheckpointLocator().locate(root, job_id, topic, pipeline)
        second = CheckpointLocator().locate(root, job_id, topic, pipeline)

        assert first == second
        assert first.url == second.url

    @given(job_id=identities, topic=topics, pipeline=identities)
    @STANDARD_SETTINGS
    def test_url_layout(self, job_id: str, topic: str, pipeline: str) -> None:
        location = CheckpointLocator().locate("/data", job_id, topic, pipeline)

        assert location.url.split("/") == ["", "data", ".spark-streaming", job_id, encode_topic(topic), pipeline]


class TestResolveProperties:
    # Plain topic lists only: heavily escaped unicode can exceed file name limits
    @given(job_id=identities, topics_=list_entries, pipeline=identities)
    @SLOW_SETTINGS
    def test_resolve_twice_is_idempotent(
        self, tmp_path_factory: pytest.TempPathFactory, job_id: str, topics_: list[str], pipeline: str
    ) -> None:
        root = tmp_path_factory.mktemp("ckpt")
        topic = ",".join(topics_)
        locator = CheckpointLocator()

        first = locator.resolve(str(root), job_id, topic, pipeline)
        second = locator.resolve(str(root), job_id, topic, pipeline)

        assert first == second
        assert Path(first.url).is_dir()
        assert Path(first.url).parent.parent.parent == root / ".spark-streaming"
