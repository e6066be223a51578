# src/sparkbinding/core/config.py
"""
Configuration resolution for streaming jobs.

Configuration arrives as a flat mapping of string keys to string values
(the same property names the cluster launcher hands to every job). This
module validates it with Pydantic and freezes it into a JobConfiguration.

resolve() never raises for bad input: it returns Ok(JobConfiguration) or
Err(ConfigError) so setup code can treat configuration problems as values.
"""

import os
import re
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Annotated, Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, StringConstraints, ValidationError

from sparkbinding.contracts import ConfigError, Err, Ok, Result

# Property names understood by the binding
TOPIC = "topic"
MAX_WAIT_TIME = "maxWaitTime"
METADATA_BROKER_LIST = "metadataBrokerList"
AUTO_OFFSET_RESET = "auto.offset.reset"
SDC_ID = "sdc.id"
PIPELINE_NAME = "cluster.pipeline.name"
SOURCE_NAME = "cluster.source.name"
DEFAULT_FS = "fs.defaultFS"
GRACEFUL_STOP_TIMEOUT = "gracefulStopTimeout"

# Keys with this prefix are forwarded to the Spark session configuration
SPARK_CONF_PREFIX = "spark."

_NonBlank = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class _RequiredProperties(BaseModel):
    """Keys every job needs regardless of source technology."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    topic: _NonBlank = Field(alias=TOPIC)
    max_wait_time: _NonBlank = Field(alias=MAX_WAIT_TIME)
    sdc_id: _NonBlank = Field(alias=SDC_ID)
    pipeline_name: _NonBlank = Field(alias=PIPELINE_NAME)
    source_name: _NonBlank = Field(alias=SOURCE_NAME)


REQUIRED_KEYS: tuple[str, ...] = tuple(field.alias for field in _RequiredProperties.model_fields.values() if field.alias)


class JobConfiguration(Mapping[str, str]):
    """Immutable, trimmed job properties.

    Every value is stripped of surrounding whitespace and non-blank; keys
    whose value was blank are treated as absent. Only resolve() builds
    instances, so holders can rely on the required keys being present.
    """

    __slots__ = ("_properties",)

    def __init__(self, properties: Mapping[str, str]) -> None:
        self._properties = MappingProxyType(dict(properties))

    def __getitem__(self, key: str) -> str:
        return self._properties[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._properties)

    def __len__(self) -> int:
        return len(self._properties)

    def __repr__(self) -> str:
        return f"JobConfiguration({dict(mask_secrets(self._properties))!r})"

    def require(self, key: str) -> str:
        """Return a value that must be present.

        Raises:
            ConfigError: If the key is absent or was blank
        """
        try:
            return self._properties[key]
        except KeyError:
            raise ConfigError(f"Property {key} cannot be null or blank", key=key) from None

    @property
    def topic(self) -> str:
        return self._properties[TOPIC]

    @property
    def max_wait_time(self) -> str:
        return self._properties[MAX_WAIT_TIME]

    @property
    def sdc_id(self) -> str:
        return self._properties[SDC_ID]

    @property
    def pipeline_name(self) -> str:
        return self._properties[PIPELINE_NAME]

    @property
    def source_name(self) -> str:
        return self._properties[SOURCE_NAME]

    @property
    def auto_offset_reset(self) -> str | None:
        return self._properties.get(AUTO_OFFSET_RESET)

    @property
    def default_fs(self) -> str | None:
        return self._properties.get(DEFAULT_FS)

    def spark_conf(self) -> dict[str, str]:
        """Properties forwarded verbatim to the Spark session."""
        return {k: v for k, v in self._properties.items() if k.startswith(SPARK_CONF_PREFIX)}


def _describe(error: Mapping[str, Any]) -> tuple[str, str]:
    """Turn one Pydantic error into (key, human-readable problem)."""
    key = str(error["loc"][0]) if error["loc"] else "<root>"
    error_type = error["type"]
    if error_type == "missing":
        problem = "is missing"
    elif error_type == "string_too_short":
        problem = "is blank"
    elif error_type == "string_type" and error.get("input") is None:
        problem = "cannot be null"
    else:
        problem = error["msg"]
    return key, problem


def resolve(raw_config: Mapping[str, Any]) -> Result[JobConfiguration, ConfigError]:
    """Validate and normalize raw job properties.

    Args:
        raw_config: Flat property mapping, untrimmed

    Returns:
        Ok(JobConfiguration) with every value trimmed, or Err(ConfigError)
        naming every required key that is absent, null or blank.
    """
    try:
        _RequiredProperties.model_validate(dict(raw_config))
    except ValidationError as e:
        problems = [_describe(error) for error in e.errors()]
        details = "; ".join(f"property {key} {problem}" for key, problem in problems)
        first_key = problems[0][0]
        raw_value = raw_config.get(first_key)
        return Err(
            ConfigError(
                f"Invalid configuration: {details}",
                key=first_key,
                value=raw_value if isinstance(raw_value, str) else None,
            )
        )

    properties: dict[str, str] = {}
    for key, value in raw_config.items():
        if value is None:
            continue
        if not isinstance(value, str):
            return Err(ConfigError(f"Property {key} must be a string, got {type(value).__name__}", key=str(key)))
        trimmed = value.strip()
        if trimmed:
            properties[str(key)] = trimmed
    return Ok(JobConfiguration(properties))


_DURATION_PATTERN = re.compile(r"[0-9]+")


def parse_duration(value: str, *, key: str = MAX_WAIT_TIME) -> int:
    """Parse a millisecond duration.

    Args:
        value: Raw value; surrounding whitespace is ignored
        key: Property name used in the error message

    Returns:
        Duration in milliseconds

    Raises:
        ConfigError: If value is not a non-negative integer literal. The
            message contains the raw value and the cause.
    """
    text = value.strip()
    if _DURATION_PATTERN.fullmatch(text) is None:
        if text.startswith("-") and _DURATION_PATTERN.fullmatch(text[1:]):
            cause = "duration must not be negative"
        else:
            cause = "expected an integer number of milliseconds"
        raise ConfigError(f"Invalid {key} '{value}' : {cause}", key=key, value=value)
    return int(text)


_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


def _expand_env_vars(value: str) -> str:
    """Expand ${VAR} and ${VAR:-default} patterns in a property value."""

    def replacer(match: re.Match[str]) -> str:
        env_value = os.environ.get(match.group(1))
        if env_value is not None:
            return env_value
        default = match.group(2)
        if default is not None:
            return default
        # Unset with no default: keep the reference so the problem is visible
        return match.group(0)

    return _ENV_VAR_PATTERN.sub(replacer, value)


def _stringify(key: str, value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return _expand_env_vars(str(value))
    raise ConfigError(
        f"Property {key} must be a scalar value, got {type(value).__name__}",
        key=key,
    )


def load_properties(config_path: Path) -> dict[str, str]:
    """Load job properties from a flat YAML mapping.

    Dotted keys such as ``sdc.id`` are kept literally, never nested.
    Scalars are converted to strings, ``${VAR}`` references are expanded
    from the environment, and null values are dropped (treated as absent).

    Args:
        config_path: Path to YAML file

    Returns:
        Flat string-to-string property mapping

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigError: If the file is not a flat mapping of scalars
        yaml.YAMLError: If the file is not valid YAML
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    loaded = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping, got {type(loaded).__name__}")

    return {str(key): _stringify(str(key), value) for key, value in loaded.items() if value is not None}


def apply_overrides(properties: Mapping[str, str], overrides: Iterable[str]) -> dict[str, str]:
    """Apply ``key=value`` overrides on top of loaded properties.

    Raises:
        ConfigError: If an override has no ``=`` or an empty key
    """
    merged = dict(properties)
    for override in overrides:
        key, sep, value = override.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ConfigError(f"Invalid override '{override}' : expected key=value", value=override)
        merged[key] = value
    return merged


# Property name fragments whose values must never reach the logs
_SECRET_MARKERS = ("password", "secret", "token", "credential", "jaas.config", "key")


def _is_secret_key(key: str) -> bool:
    lowered = key.lower()
    return any(marker in lowered for marker in _SECRET_MARKERS)


def mask_secrets(properties: Mapping[str, str]) -> dict[str, str]:
    """Copy of properties with secret-looking values replaced by ``***``."""
    return {key: "***" if _is_secret_key(key) else value for key, value in properties.items()}
