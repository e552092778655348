"""ContextVar-based parse configuration for Cotejo.

Provides thread-local configuration using Python's ContextVars (PEP 567).
Config is set once per Checker instance, read by the parser and validator in
the context.

Thread Safety:
    Each thread has its own ContextVar storage; no locks are needed.

Usage:
    from cotejo.config import set_parse_config, reset_parse_config, ParseConfig

    set_parse_config(ParseConfig(default_filetype="project"))
    try:
        doc = Parser(source).parse()
    finally:
        reset_parse_config()

    # Or use the context manager
    with parse_config_context(ParseConfig(max_nesting=8)):
        doc = Parser(source).parse()

"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cotejo.filetypes import FiletypeRegistry


@dataclass(frozen=True, slots=True)
class ParseConfig:
    """Immutable parse configuration.

    Frozen dataclass ensures thread-safety (immutable after creation).

    source_file is per-call state, not configuration. It stays on the Parser
    instance.

    Attributes:
        default_filetype: Filetype used when neither front matter nor the
            caller names one
        registry: Filetype registry (None = built-in registry)
        max_nesting: Deepest container / inline nesting parsed structurally;
            anything deeper is kept as plain text

    """

    default_filetype: str = "note"
    registry: FiletypeRegistry | None = None
    max_nesting: int = 32

    def get_registry(self) -> FiletypeRegistry:
        """The configured registry, or the built-in default."""
        if self.registry is not None:
            return self.registry
        from cotejo.filetypes import create_default_registry

        return create_default_registry()

    @classmethod
    def from_dict(cls, config_dict: dict) -> "ParseConfig":
        """Create ParseConfig from dictionary.

        Only includes keys that are valid ParseConfig fields; unknown keys
        are silently ignored.

        Args:
            config_dict: Dictionary with config values. Keys should match
                ParseConfig attribute names.

        Returns:
            New ParseConfig instance with values from dict.

        Example:
            >>> config = ParseConfig.from_dict({
            ...     "default_filetype": "project",
            ...     "unknown_key": "ignored",
            ... })
            >>> config.default_filetype
            'project'

        """
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in config_dict.items() if k in valid_fields}
        return cls(**filtered)


# Module-level default config (reused, never recreated)
_DEFAULT_CONFIG: ParseConfig = ParseConfig()

# Thread-local configuration via ContextVar
_parse_config: ContextVar[ParseConfig] = ContextVar(
    "parse_config",
    default=_DEFAULT_CONFIG,
)


def get_parse_config() -> ParseConfig:
    """Get current parse configuration (thread-local).

    Returns:
        The active ParseConfig for this thread/context.

    """
    return _parse_config.get()


def set_parse_config(config: ParseConfig) -> None:
    """Set parse configuration for current context.

    Thread Safety:
        Only affects the current thread's context. Other threads are unaffected.

    """
    _parse_config.set(config)


def reset_parse_config() -> None:
    """Reset to default configuration.

    Reuses the module-level _DEFAULT_CONFIG singleton, avoiding allocation.

    """
    _parse_config.set(_DEFAULT_CONFIG)


@contextmanager
def parse_config_context(config: ParseConfig) -> Iterator[None]:
    """Context manager for temporary config changes.

    Args:
        config: ParseConfig to use within the context.

    Example:
        >>> with parse_config_context(ParseConfig(default_filetype="project")):
        ...     doc = Parser("# Hi").parse()
        >>> # Automatically reset to previous config

    Thread Safety:
        Only affects the current thread's context. Properly restores previous
        config even if an exception is raised.

    """
    previous = _parse_config.get()
    _parse_config.set(config)
    try:
        yield
    finally:
        _parse_config.set(previous)


__all__ = [
    "ParseConfig",
    "get_parse_config",
    "set_parse_config",
    "reset_parse_config",
    "parse_config_context",
]
