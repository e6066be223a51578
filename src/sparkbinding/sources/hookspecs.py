# src/sparkbinding/sources/hookspecs.py
"""pluggy hook specifications for stream source plugins.

Usage (registering an additional broker technology):
    from sparkbinding.sources.hookspecs import hookimpl

    class PulsarSources:
        @hookimpl  # NOT @hookspec - that's for defining specs
        def sparkbinding_get_sources(self):
            return [PulsarSource]

    factory = StreamSourceFactory()
    factory.register(PulsarSources())
"""

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from sparkbinding.sources.base import StreamSource

PROJECT_NAME = "sparkbinding"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)

hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class SparkbindingSourceSpec:
    """Hook specifications for stream source plugins."""

    @hookspec
    def sparkbinding_get_sources(self) -> list[type["StreamSource"]]:  # type: ignore[empty-body]
        """Return stream source plugin classes.

        Returns:
            List of StreamSource subclasses (not instances)
        """
