"""Exception taxonomy for the streaming binding.

Every failure raised by this package derives from BindingError so the host
process can tell binding failures apart from bugs in its own batch handler.

- ConfigError: missing, blank, malformed or unsupported configuration.
  Always raised before any execution graph starts.
- StorageError: the checkpoint directory cannot be provisioned.
- StreamingRuntimeError: the streaming runtime failed to start or failed
  while running. Not retried here; recovery is the runtime's job.
- JobStateError: a lifecycle call that the current state does not allow.
"""


class BindingError(Exception):
    """Base class for all streaming binding failures."""


class ConfigError(BindingError):
    """Raised when a configuration value is absent, blank, invalid or unsupported.

    Attributes:
        key: Configuration key at fault, when a single key is involved
        value: Offending raw value, when one was supplied
    """

    def __init__(self, message: str, *, key: str | None = None, value: str | None = None) -> None:
        self.key = key
        self.value = value
        super().__init__(message)


class StorageError(BindingError):
    """Raised when the checkpoint directory cannot be created or read.

    Attributes:
        path: Filesystem URL of the checkpoint directory
    """

    def __init__(self, message: str, *, path: str) -> None:
        self.path = path
        super().__init__(message)


class StreamingRuntimeError(BindingError):
    """Raised when the streaming runtime fails to start or fails while running."""


class JobStateError(BindingError):
    """Raised when a lifecycle operation is invalid for the current job state."""
