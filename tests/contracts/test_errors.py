"""Tests for the binding exception taxonomy."""

import pytest

from sparkbinding.contracts import (
    BindingError,
    ConfigError,
    JobStateError,
    StorageError,
    StreamingRuntimeError,
)


class TestErrorHierarchy:
    """Every binding failure shares one base class."""

    @pytest.mark.parametrize("error_cls", [ConfigError, StorageError, StreamingRuntimeError, JobStateError])
    def test_derives_from_binding_error(self, error_cls: type[Exception]) -> None:
        assert issubclass(error_cls, BindingError)

    def test_streaming_runtime_error_does_not_shadow_builtin(self) -> None:
        assert not issubclass(StreamingRuntimeError, RuntimeError)


class TestConfigError:
    def test_carries_key_and_value(self) -> None:
        error = ConfigError("Invalid maxWaitTime 'abc'", key="maxWaitTime", value="abc")

        assert error.key == "maxWaitTime"
        assert error.value == "abc"
        assert str(error) == "Invalid maxWaitTime 'abc'"

    def test_key_and_value_default_to_none(self) -> None:
        error = ConfigError("bad")

        assert error.key is None
        assert error.value is None


class TestStorageError:
    def test_carries_path(self) -> None:
        error = StorageError("Could not create checkpoint path", path="/tmp/x")

        assert error.path == "/tmp/x"
        assert "Could not create" in str(error)
