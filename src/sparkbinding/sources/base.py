"""Base class for stream source plugins."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sparkbinding.contracts import StreamSourceSpec
    from sparkbinding.core.config import JobConfiguration


class StreamSource(ABC):
    """A broker technology a streaming job can consume from.

    Subclasses set ``name`` (matched case-insensitively against
    ``cluster.source.name``) and turn job configuration into a
    StreamSourceSpec. They are stateless; the factory instantiates one per
    build.
    """

    name: str

    @abstractmethod
    def build(self, config: "JobConfiguration") -> "StreamSourceSpec":
        """Build the source spec for a new streaming job.

        Raises:
            ConfigError: If a key this source needs is absent or invalid
        """
