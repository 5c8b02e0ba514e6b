"""
The logging system: registry state, configuration loading and lifecycle.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

from pydantic import ValidationError

from .bootstrap import get_bootstrap_logger
from .config import LoggingConfig
from .errors import LoggingConfigError, MissingSectionError
from .levels import Severity, parse_filters, resolve_level
from .logger import BoundSink, NamedLogger
from .sinks import SINK_FACTORIES, Closable, Reloadable, Sink, SinkContext, SinkFactory

# =============================================================================
# Registry State
# =============================================================================


@dataclass(frozen=True)
class SinkHandle:
    """One configured sink with its maximum level and name filters."""

    mode: str
    sink: Sink
    format: str
    max_level: Severity
    filters: Mapping[str, Severity] = field(default_factory=dict)

    def level_for(self, name: str) -> Severity:
        return self.filters.get(name, self.max_level)


@dataclass(frozen=True)
class RegistryState:
    """Everything a load produces, published with a single assignment."""

    sinks: tuple[SinkHandle, ...] = ()
    closers: tuple[Closable, ...] = ()
    reloaders: tuple[Reloadable, ...] = ()
    filters: Mapping[str, Severity] = field(default_factory=lambda: MappingProxyType({}))


# =============================================================================
# Logging System
# =============================================================================


class LoggingSystem:
    """An independent logging pipeline.

    Args:
        stdout: Stream used by the console sink (default: ``sys.stdout``).
        diagnostics: Logger for internal diagnostics (default: bootstrap logger).
        factories: Mode name to sink factory table (default: the built-in table).
    """

    def __init__(
        self,
        *,
        stdout: Any = None,
        diagnostics: Any = None,
        factories: Optional[Mapping[str, SinkFactory]] = None,
    ) -> None:
        self._stdout = stdout
        self._diagnostics = diagnostics
        self._factories = factories if factories is not None else SINK_FACTORIES
        self._state = RegistryState()

    @property
    def _log(self) -> Any:
        return self._diagnostics if self._diagnostics is not None else get_bootstrap_logger()

    @property
    def sinks(self) -> tuple[SinkHandle, ...]:
        return self._state.sinks

    @property
    def filters(self) -> Mapping[str, Severity]:
        return self._state.filters

    # -------------------------------------------------------------------------
    # Named loggers
    # -------------------------------------------------------------------------

    def new(self, name: str, **context: Any) -> NamedLogger:
        """Create a logger bound to ``name`` over the sinks configured right now."""
        bound = tuple(BoundSink(handle.sink, handle.level_for(name)) for handle in self._state.sinks)
        return NamedLogger(name, context, bound)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Close every closable sink.

        All sinks are attempted; the first error is raised afterwards. The
        closable list is cleared either way.
        """
        state = self._state
        first_error: Optional[BaseException] = None
        for closer in state.closers:
            try:
                closer.close()
            except Exception as exc:
                if first_error is None:
                    first_error = exc
        self._state = replace(self._state, closers=())
        if first_error is not None:
            raise first_error

    def reload(self) -> None:
        """Reload reloadable sinks in order, stopping at the first failure."""
        for reloader in self._state.reloaders:
            reloader.reload()

    def load(self, modes: Iterable[str], logs_path: str, config: LoggingConfig) -> None:
        """Replace the current sinks with the ones ``config`` enables.

        The current sinks are closed first. If building a new sink fails, the
        sinks built so far are closed too, the system is left with no sinks,
        and the error propagates.
        """
        try:
            self.close()
        except Exception as exc:
            self._log.error("Failed to close log handlers", err=str(exc))

        self._state = RegistryState()
        built: list[SinkHandle] = []
        try:
            state = self._build_state(modes, logs_path, config, built)
        except BaseException:
            self._close_quietly(built)
            raise
        self._state = state

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def _build_state(
        self,
        modes: Iterable[str],
        logs_path: str,
        config: LoggingConfig,
        built: list[SinkHandle],
    ) -> RegistryState:
        default_level = resolve_level(config.log.level, self._diagnostics)
        default_filters = parse_filters(config.log.filters, self._diagnostics)

        closers: list[Closable] = []
        reloaders: list[Reloadable] = []
        global_filters: dict[str, Severity] = {}

        for raw_mode in modes:
            mode = raw_mode.strip()
            if not mode:
                continue
            factory = self._factories.get(mode)
            if factory is None:
                self._log.warning("Unknown log mode", mode=mode)
                continue

            handle = self._build_handle(mode, factory, logs_path, config, default_level)
            built.append(handle)

            mode_filters = dict(handle.filters)
            for name, level in default_filters.items():
                mode_filters.setdefault(name, level)
            for name, level in mode_filters.items():
                global_filters.setdefault(name, level)
            handle = replace(handle, filters=MappingProxyType(mode_filters))
            built[-1] = handle

            if isinstance(handle.sink, Closable):
                closers.append(handle.sink)
            if isinstance(handle.sink, Reloadable):
                reloaders.append(handle.sink)

        return RegistryState(
            sinks=tuple(built),
            closers=tuple(closers),
            reloaders=tuple(reloaders),
            filters=MappingProxyType(global_filters),
        )

    def _build_handle(
        self,
        mode: str,
        factory: SinkFactory,
        logs_path: str,
        config: LoggingConfig,
        default_level: Severity,
    ) -> SinkHandle:
        raw = config.section(mode)
        if raw is None:
            self._log.error("Unknown log mode", mode=mode)
            raise MissingSectionError(mode=mode)
        try:
            section = factory.section_model.model_validate(raw)
        except ValidationError as exc:
            raise LoggingConfigError(
                f"invalid config section log.{mode}: {exc}",
                details={"mode": mode, "errors": exc.errors(include_url=False)},
            ) from exc

        max_level = resolve_level(section.level, self._diagnostics) if section.level else default_level
        mode_filters = parse_filters(section.filters, self._diagnostics)

        context = SinkContext(mode=mode, logs_path=logs_path, stdout=self._stdout, diagnostics=self._diagnostics)
        sink = factory.from_section(section, context)
        if sink is None:
            raise RuntimeError(f"Handler is uninitialized for mode {mode!r}")

        return SinkHandle(
            mode=mode,
            sink=sink,
            format=section.format,
            max_level=max_level,
            filters=mode_filters,
        )

    def _close_quietly(self, handles: Iterable[SinkHandle]) -> None:
        for handle in handles:
            if isinstance(handle.sink, Closable):
                try:
                    handle.sink.close()
                except Exception as exc:
                    self._log.error("Failed to close log handler", mode=handle.mode, err=str(exc))
