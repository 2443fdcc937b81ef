"""
Immutable export configuration.
"""
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional, Sequence, Tuple, Union

from graphite_sink.common.exceptions import ConfigurationError
from graphite_sink.config.settings import DEFAULT_PERCENTILES, GraphiteSettings, load_env_file
from graphite_sink.exporter.formatter import DEFAULT_FIELD_NAMES

NANOSECOND = 1
MICROSECOND = 1_000
MILLISECOND = 1_000_000
SECOND = 1_000_000_000

Address = Tuple[str, int]


def parse_address(address: Union[str, Sequence]) -> Address:
    """
    Normalize ``"host:port"`` or ``(host, port)`` into a ``(host, port)`` tuple.

    Raises:
        ConfigurationError: if the address cannot be parsed
    """
    if isinstance(address, str):
        host, sep, port = address.rpartition(":")
        if not sep or not host:
            raise ConfigurationError(f"Address must be 'host:port', got {address!r}")
        host = host.strip("[]")
    else:
        try:
            host, port = address
        except (TypeError, ValueError):
            raise ConfigurationError(f"Address must be (host, port), got {address!r}")
    try:
        port = int(port)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid port in address {address!r}")
    if not 0 < port < 65536:
        raise ConfigurationError(f"Port out of range in address {address!r}")
    return str(host), port


@dataclass(frozen=True)
class ExportConfig:
    """
    Everything one export cycle needs.

    The registry is referenced, not copied: each cycle reads its current
    contents. Only ``each(visitor)`` is required of it.

    Attributes:
        address: Graphite server as (host, port) or "host:port"
        registry: Object exposing ``each(visitor(name, metric))``
        flush_interval: Seconds between cycles when scheduled
        duration_unit: Nanoseconds per exported timer unit (MILLISECOND -> ms)
        prefix: Prepended to every metric path
        percentiles: Fractions in [0, 1] exported for histograms and timers
        connect_timeout: Socket timeout in seconds; None blocks indefinitely
        field_names: Overrides for the wire field suffixes
    """
    address: Address
    registry: Any = field(compare=False)
    flush_interval: float = 60.0
    duration_unit: int = NANOSECOND
    prefix: str = ""
    percentiles: Tuple[float, ...] = tuple(DEFAULT_PERCENTILES)
    connect_timeout: Optional[float] = None
    field_names: Mapping[str, str] = field(
        default_factory=lambda: DEFAULT_FIELD_NAMES, compare=False
    )

    def __post_init__(self):
        object.__setattr__(self, "address", parse_address(self.address))

        if not callable(getattr(self.registry, "each", None)):
            raise ConfigurationError("registry must provide each(visitor)")
        if self.flush_interval <= 0:
            raise ConfigurationError(f"flush_interval must be positive, got {self.flush_interval}")
        if int(self.duration_unit) <= 0:
            raise ConfigurationError(f"duration_unit must be positive, got {self.duration_unit}")
        object.__setattr__(self, "duration_unit", int(self.duration_unit))

        percentiles = tuple(float(p) for p in self.percentiles)
        for p in percentiles:
            if not 0.0 <= p <= 1.0:
                raise ConfigurationError(f"percentile {p} is outside [0, 1]")
        object.__setattr__(self, "percentiles", percentiles)

        if self.connect_timeout is not None and self.connect_timeout <= 0:
            raise ConfigurationError("connect_timeout must be positive or None")

        unknown = set(self.field_names) - set(DEFAULT_FIELD_NAMES)
        if unknown:
            raise ConfigurationError(f"Unknown field names: {sorted(unknown)}")
        names = dict(DEFAULT_FIELD_NAMES)
        names.update(self.field_names)
        object.__setattr__(self, "field_names", MappingProxyType(names))


def create_export_config_from_settings(
    registry: Any,
    graphite_settings: Optional[GraphiteSettings] = None
) -> ExportConfig:
    """
    Build an ``ExportConfig`` from environment settings.

    Args:
        registry: Metric registry to export
        graphite_settings: Explicit settings; loaded from the environment
            (and the nearest .env file) if None

    Returns:
        Validated ExportConfig
    """
    if graphite_settings is None:
        load_env_file()
        try:
            graphite_settings = GraphiteSettings()
        except ValueError as exc:
            raise ConfigurationError(f"Invalid Graphite settings: {exc}") from exc

    return ExportConfig(
        address=(graphite_settings.host, graphite_settings.port),
        registry=registry,
        flush_interval=graphite_settings.flush_interval_seconds,
        duration_unit=graphite_settings.duration_unit_ns,
        prefix=graphite_settings.prefix,
        percentiles=tuple(graphite_settings.percentiles),
        connect_timeout=graphite_settings.connect_timeout_seconds,
    )
