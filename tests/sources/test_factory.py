# tests/sources/test_factory.py
"""Tests for StreamSourceFactory lookup and plugin registration."""

from typing import ClassVar

import pytest

from sparkbinding.contracts import ConfigError, StreamSourceSpec
from sparkbinding.core.config import JobConfiguration, resolve
from sparkbinding.sources import StreamSource, StreamSourceFactory, hookimpl
from sparkbinding.sources.kafka import KafkaDirectSource


class _StaticSource(StreamSource):
    name = "static"
    built: ClassVar[list[JobConfiguration]] = []

    def build(self, config: JobConfiguration) -> StreamSourceSpec:
        self.built.append(config)
        return StreamSourceSpec(kind="static", brokers=("localhost:1",), topics=(config.topic,))


class _StaticPlugin:
    @hookimpl
    def sparkbinding_get_sources(self) -> list[type[StreamSource]]:
        return [_StaticSource]


class _ShadowingKafka(KafkaDirectSource):
    name = "KAFKA"


class _ShadowingPlugin:
    @hookimpl
    def sparkbinding_get_sources(self) -> list[type[StreamSource]]:
        return [_ShadowingKafka]


class TestLookup:
    def test_builtins_registered(self) -> None:
        assert StreamSourceFactory().source_names == ["kafka"]

    def test_without_builtins(self) -> None:
        assert StreamSourceFactory(register_builtins=False).source_names == []

    @pytest.mark.parametrize("name", ["kafka", "KAFKA", "Kafka"])
    def test_case_insensitive(self, name: str) -> None:
        assert StreamSourceFactory().get_source_by_name(name) is KafkaDirectSource

    def test_unknown_returns_none(self) -> None:
        assert StreamSourceFactory().get_source_by_name("pulsar") is None


class TestBuild:
    def test_builds_kafka(self, job_config: JobConfiguration) -> None:
        spec = StreamSourceFactory().build(job_config.source_name, job_config)

        assert spec.kind == "kafka"
        assert spec.topics == ("orders", "payments")

    def test_kind_matched_case_insensitively(self, job_config: JobConfiguration) -> None:
        assert StreamSourceFactory().build("KAFKA", job_config).kind == "kafka"

    def test_unsupported_source(self, properties: dict[str, str]) -> None:
        properties["cluster.source.name"] = "unknown-source"
        config = resolve(properties).unwrap()

        with pytest.raises(ConfigError) as exc_info:
            StreamSourceFactory().build(config.source_name, config)

        assert "unknown-source" in str(exc_info.value)
        assert "kafka" in str(exc_info.value)
        assert exc_info.value.key == "cluster.source.name"
        assert exc_info.value.value == "unknown-source"

    def test_source_errors_propagate(self, properties: dict[str, str]) -> None:
        del properties["metadataBrokerList"]
        config = resolve(properties).unwrap()

        with pytest.raises(ConfigError, match="metadataBrokerList"):
            StreamSourceFactory().build("kafka", config)


class TestPluginRegistration:
    def test_register_additional_source(self, job_config: JobConfiguration) -> None:
        factory = StreamSourceFactory()
        factory.register(_StaticPlugin())

        spec = factory.build("static", job_config)

        assert factory.source_names == ["kafka", "static"]
        assert spec.kind == "static"
        assert spec.topics == ("orders,payments",)

    def test_duplicate_name_rejected(self) -> None:
        factory = StreamSourceFactory()

        with pytest.raises(ValueError, match="Duplicate source plugin name: 'kafka'"):
            factory.register(_ShadowingPlugin())

    def test_builtins_can_be_replaced(self, job_config: JobConfiguration) -> None:
        factory = StreamSourceFactory(register_builtins=False)
        factory.register(_ShadowingPlugin())

        assert factory.get_source_by_name("kafka") is _ShadowingKafka
