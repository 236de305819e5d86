"""
Startup initializer pipeline.

Each initializer reads its own configuration section and fills part of the
``ApplicationState``. The pipeline runs them in order and stops at the
first exception, which is re-raised as is:

    kvstore -> storage -> shard -> basic options -> sentry

Usage:
    state = initialize(ConfigSource.from_file("config.yaml"))
    state.source_storage.open("photos/cat.jpg")
"""

import time
from typing import Any, Callable, Mapping, Optional, Sequence, Tuple, Union

from .config import ConfigSource, project_config_map
from .constants import (
    DEFAULT_FORMAT,
    DEFAULT_QUALITY,
    DEFAULT_SHARD_DEPTH,
    DEFAULT_SHARD_WIDTH,
)
from .engine import ImageEngine
from .exceptions import ConfigurationError, ImagefitError, IncompleteApplicationState
from .factories import KV_STORES, STORAGES, LoggerFactory
from .models import ShardPolicy
from .observability import LogContext, MetricsCollector, PerformanceMetrics
from .protocols import BlobStorageProtocol, LoggerProtocol
from .registry import BackendRegistry
from .reporting import ErrorReporter
from .state import ApplicationState

Initializer = Callable[[ConfigSource, ApplicationState], None]

_logger = LoggerFactory.create_logger("imagefit.initializers")


def make_kvstore_initializer(registry: BackendRegistry = KV_STORES) -> Initializer:
    """Select the key-value store named by ``kvstore.type``."""

    def kvstore_initializer(config: ConfigSource, state: ApplicationState) -> None:
        type_id = config.get_string("kvstore.type")
        registry.resolve(type_id)

        params = project_config_map(config, "kvstore")
        state.kv_store = registry.build(type_id, params)
        state.key_prefix = params.get("prefix", "")

    return kvstore_initializer


def _storage_from_config(
    config: ConfigSource, registry: BackendRegistry, key: str
) -> BlobStorageProtocol:
    namespace = f"storage.{key}"
    type_id = config.get_string(f"{namespace}.type")
    registry.resolve(type_id)

    params = project_config_map(config, namespace)
    return registry.build(type_id, params)


def make_storage_initializer(registry: BackendRegistry = STORAGES) -> Initializer:
    """
    Select source and destination storages.

    A source storage is mandatory. When the destination cannot be built,
    for whatever reason, the source instance serves as destination too;
    single-storage deployments simply omit ``storage.dst``.
    """

    def storage_initializer(config: ConfigSource, state: ApplicationState) -> None:
        source = _storage_from_config(config, registry, "src")
        state.source_storage = source

        try:
            dest = _storage_from_config(config, registry, "dst")
        except ImagefitError as exc:
            if config.has("storage.dst"):
                _logger.warning(f"Destination storage unavailable, using source storage: {exc}")
            else:
                _logger.debug("No destination storage configured, using source storage")
            dest = source

        state.dest_storage = dest

    return storage_initializer


def _shard_value(config: ConfigSource, key: str, default: int) -> int:
    value = config.get_int(key)
    if value < 0:
        raise ConfigurationError(f"'{key}' must be >= 0, got {value}")
    return value or default


def shard_initializer(config: ConfigSource, state: ApplicationState) -> None:
    state.shard_policy = ShardPolicy(
        width=_shard_value(config, "shard.width", DEFAULT_SHARD_WIDTH),
        depth=_shard_value(config, "shard.depth", DEFAULT_SHARD_DEPTH),
    )


def _lenient(getter: Callable[[str], Any], key: str, default: Any) -> Any:
    try:
        return getter(key)
    except ConfigurationError as exc:
        _logger.warning(f"Ignoring invalid '{key}', using {default!r}: {exc}")
        return default


def basic_initializer(config: ConfigSource, state: ApplicationState) -> None:
    """Engine, secret key and feature flags. Bad values fall back to defaults."""
    fmt = _lenient(config.get_string, "options.format", "")
    quality = _lenient(config.get_int, "options.quality", 0)

    if quality == 0:
        quality = DEFAULT_QUALITY

    state.secret_key = _lenient(config.get_string, "secret_key", "")
    state.engine = ImageEngine(
        format=fmt,
        default_format=DEFAULT_FORMAT,
        quality=quality,
    )
    state.enable_upload = _lenient(config.get_bool, "options.enable_upload", False)
    state.enable_delete = _lenient(config.get_bool, "options.enable_delete", False)


def sentry_initializer(config: ConfigSource, state: ApplicationState) -> None:
    tags = project_config_map(config, "sentry.tags")

    options = {}
    for key in ("environment", "release"):
        value = config.get_string(f"sentry.{key}")
        if value:
            options[key] = value

    state.error_reporter = ErrorReporter.from_dsn(
        config.get_string("sentry.dsn"), tags, **options
    )


kvstore_initializer = make_kvstore_initializer()
storage_initializer = make_storage_initializer()

DEFAULT_INITIALIZERS: Tuple[Initializer, ...] = (
    kvstore_initializer,
    storage_initializer,
    shard_initializer,
    basic_initializer,
    sentry_initializer,
)


class InitializerPipeline:
    """Runs initializers strictly in order, failing fast."""

    def __init__(
        self,
        initializers: Optional[Sequence[Initializer]] = None,
        logger: Optional[LoggerProtocol] = None,
        metrics_collector: Optional[MetricsCollector] = None,
    ):
        self._initializers: Tuple[Initializer, ...] = tuple(
            DEFAULT_INITIALIZERS if initializers is None else initializers
        )
        self._logger = logger or _logger
        self._metrics_collector = metrics_collector
        self.failed_step: Optional[str] = None

    @property
    def steps(self) -> Tuple[str, ...]:
        return tuple(_step_name(step) for step in self._initializers)

    def _record(self, name: str, start_time: float, success: bool, error: Optional[str] = None):
        if self._metrics_collector:
            self._metrics_collector.record_metric(
                PerformanceMetrics(
                    operation=name,
                    start_time=start_time,
                    end_time=time.time(),
                    success=success,
                    error_message=error,
                )
            )

    def run(
        self,
        config: Union[ConfigSource, Mapping[str, Any]],
        state: Optional[ApplicationState] = None,
    ) -> ApplicationState:
        """
        Build application state from ``config``.

        Args:
            config: Configuration source or plain mapping
            state: State to populate; a fresh one is created if omitted

        Returns:
            The populated and frozen application state

        Raises:
            Exception: Whatever the failing initializer raised, annotated
                with the initializer name; later initializers do not run
            IncompleteApplicationState: If required fields are left unset
        """
        if not isinstance(config, ConfigSource):
            config = ConfigSource(config)
        if state is None:
            state = ApplicationState()
        state.config = config
        self.failed_step = None

        context = LogContext(component="initializer_pipeline")
        for step in self._initializers:
            name = _step_name(step)
            step_context = context.with_operation(name)
            start_time = time.time()
            self._logger.debug("Running initializer", step_context)

            try:
                step(config, state)
            except Exception as exc:
                self.failed_step = name
                self._record(name, start_time, False, str(exc))
                self._logger.error(f"Initializer failed: {exc}", step_context)
                exc.add_note(f"raised by initializer '{name}'")
                raise

            self._record(name, start_time, True)

        missing = state.missing_fields()
        if missing:
            self.failed_step = "validate"
            raise IncompleteApplicationState(missing)

        state.freeze()
        self._logger.info(
            "Application initialized",
            context.with_operation("initialize"),
            steps=len(self._initializers),
        )
        return state


def _step_name(step: Initializer) -> str:
    return getattr(step, "__name__", type(step).__name__)


def initialize(
    config: Union[ConfigSource, Mapping[str, Any]],
    initializers: Optional[Sequence[Initializer]] = None,
    logger: Optional[LoggerProtocol] = None,
) -> ApplicationState:
    """Run the initializer pipeline and return the frozen application state."""
    return InitializerPipeline(initializers, logger=logger).run(config)
