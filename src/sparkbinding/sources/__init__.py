"""Broker consumption sources for streaming jobs.

Sources are looked up through StreamSourceFactory, not imported directly:
    factory = StreamSourceFactory()
    spec = factory.build(config.source_name, config)
"""

from sparkbinding.sources.base import StreamSource
from sparkbinding.sources.factory import StreamSourceFactory
from sparkbinding.sources.hookspecs import hookimpl

__all__ = ["StreamSource", "StreamSourceFactory", "hookimpl"]
