# src/sparkbinding/sources/factory.py
"""Stream source lookup and construction.

Uses pluggy for hook-based source registration, so additional broker
technologies can be plugged in without touching the lifecycle controller.
"""

from typing import Any

import pluggy

from sparkbinding.contracts import ConfigError, StreamSourceSpec
from sparkbinding.core.config import SOURCE_NAME, JobConfiguration
from sparkbinding.sources.base import StreamSource
from sparkbinding.sources.hookspecs import PROJECT_NAME, SparkbindingSourceSpec, hookimpl
from sparkbinding.sources.kafka import KafkaDirectSource


class _BuiltinSources:
    """Registers the source technologies shipped with sparkbinding."""

    @hookimpl
    def sparkbinding_get_sources(self) -> list[type[StreamSource]]:
        return [KafkaDirectSource]


class StreamSourceFactory:
    """Builds broker consumption sources by technology name.

    Usage:
        factory = StreamSourceFactory()
        spec = factory.build("kafka", config)
    """

    def __init__(self, *, register_builtins: bool = True) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(SparkbindingSourceSpec)
        self._sources: dict[str, type[StreamSource]] = {}
        if register_builtins:
            self.register(_BuiltinSources())

    def register(self, plugin: Any) -> None:
        """Register a plugin implementing ``sparkbinding_get_sources``."""
        self._pm.register(plugin)
        self._refresh_cache()

    def _refresh_cache(self) -> None:
        """Rebuild the name -> class map from all registered plugins.

        Raises:
            ValueError: If two plugins register the same source name
        """
        sources: dict[str, type[StreamSource]] = {}
        for classes in self._pm.hook.sparkbinding_get_sources():
            for cls in classes:
                name = cls.name.lower()
                if name in sources:
                    raise ValueError(f"Duplicate source plugin name: '{name}'. Already registered by {sources[name].__name__}")
                sources[name] = cls
        self._sources = sources

    @property
    def source_names(self) -> list[str]:
        return sorted(self._sources)

    def get_source_by_name(self, name: str) -> type[StreamSource] | None:
        """Look up a source class, ignoring case."""
        return self._sources.get(name.lower())

    def build(self, source_kind: str, config: JobConfiguration) -> StreamSourceSpec:
        """Build the consumption source for a new streaming job.

        Args:
            source_kind: Source technology (``cluster.source.name``)
            config: Resolved job configuration

        Returns:
            Immutable source spec

        Raises:
            ConfigError: If source_kind is not registered, or the source
                rejects the configuration. Never retried.
        """
        source_cls = self.get_source_by_name(source_kind)
        if source_cls is None:
            raise ConfigError(
                f"Property value {source_kind} is invalid: unsupported source (supported: {', '.join(self.source_names)})",
                key=SOURCE_NAME,
                value=source_kind,
            )
        return source_cls().build(config)
