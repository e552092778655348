"""Tests for ContextVar-based parse configuration.

Validates thread isolation, context manager behavior, and that parsing
and validation read the active config.
"""

from threading import Thread

import pytest

from cotejo import (
    ParseConfig,
    Parser,
    get_parse_config,
    parse,
    parse_config_context,
    reset_parse_config,
    set_parse_config,
    validate,
)
from cotejo.diagnostics import DiagnosticKind
from cotejo.filetypes import Filetype, FiletypeRegistryBuilder, create_default_registry


class TestParseConfigDataclass:
    """Test ParseConfig frozen dataclass behavior."""

    def test_default_values(self) -> None:
        config = ParseConfig()
        assert config.default_filetype == "note"
        assert config.registry is None
        assert config.max_nesting == 32

    def test_immutability(self) -> None:
        """Config is frozen and cannot be modified."""
        config = ParseConfig()
        with pytest.raises(AttributeError):
            config.max_nesting = 4  # type: ignore[misc]

    def test_default_registry(self) -> None:
        assert ParseConfig().get_registry() is create_default_registry()

    def test_custom_registry(self) -> None:
        registry = FiletypeRegistryBuilder().register(Filetype("only")).build()
        assert ParseConfig(registry=registry).get_registry() is registry

    def test_empty_registry_is_used(self) -> None:
        registry = FiletypeRegistryBuilder().build()
        assert ParseConfig(registry=registry).get_registry() is registry


class TestFromDict:
    """ParseConfig.from_dict."""

    def test_known_keys(self) -> None:
        config = ParseConfig.from_dict({"default_filetype": "project", "max_nesting": 8})
        assert config == ParseConfig(default_filetype="project", max_nesting=8)

    def test_unknown_keys_ignored(self) -> None:
        config = ParseConfig.from_dict({"default_filetype": "context", "theme": "dark"})
        assert config.default_filetype == "context"

    def test_empty(self) -> None:
        assert ParseConfig.from_dict({}) == ParseConfig()


class TestContextVarFunctions:
    """Test get/set/reset functions."""

    def teardown_method(self) -> None:
        """Reset config after each test."""
        reset_parse_config()

    def test_default_config(self) -> None:
        assert get_parse_config() == ParseConfig()

    def test_set_and_get(self) -> None:
        set_parse_config(ParseConfig(default_filetype="project"))
        assert get_parse_config().default_filetype == "project"

    def test_reset_restores_default(self) -> None:
        set_parse_config(ParseConfig(max_nesting=2))
        reset_parse_config()
        assert get_parse_config().max_nesting == 32


class TestParseConfigContext:
    """Test parse_config_context context manager."""

    def test_context_sets_config(self) -> None:
        with parse_config_context(ParseConfig(default_filetype="project")):
            assert get_parse_config().default_filetype == "project"
        assert get_parse_config().default_filetype == "note"

    def test_nested_contexts(self) -> None:
        with parse_config_context(ParseConfig(default_filetype="project")):
            with parse_config_context(ParseConfig(max_nesting=4)):
                # New config replaces the outer one entirely
                assert get_parse_config().default_filetype == "note"
                assert get_parse_config().max_nesting == 4
            assert get_parse_config().default_filetype == "project"
        assert get_parse_config() == ParseConfig()

    def test_context_restores_on_exception(self) -> None:
        with pytest.raises(ValueError, match="test"):
            with parse_config_context(ParseConfig(max_nesting=1)):
                raise ValueError("test")
        assert get_parse_config().max_nesting == 32


class TestConfigIsRead:
    """Parsing and validation use the active config."""

    def test_default_filetype(self) -> None:
        with parse_config_context(ParseConfig(default_filetype="project")):
            assert parse("# A").filetype == "project"

    def test_hint_beats_default(self) -> None:
        with parse_config_context(ParseConfig(default_filetype="project")):
            assert parse("# A", filetype="context").filetype == "context"

    def test_registry_used_by_validate(self) -> None:
        registry = FiletypeRegistryBuilder().register(Filetype("only")).build()
        doc = parse("# A")
        with parse_config_context(ParseConfig(registry=registry)):
            diagnostics = validate(doc)
        assert [d.kind for d in diagnostics] == [DiagnosticKind.UNKNOWN_FILETYPE]

    def test_parser_snapshots_nesting_limit(self) -> None:
        with parse_config_context(ParseConfig(max_nesting=5)):
            parser = Parser("> a")
        assert parser._max_nesting == 5


class TestThreadIsolation:
    """Test thread-local configuration isolation."""

    def test_thread_isolation(self) -> None:
        """Each thread sees its own config."""
        results: dict[int, tuple[str, int]] = {}

        def worker(thread_id: int, config: ParseConfig) -> None:
            set_parse_config(config)
            doc = parse("# Test")
            results[thread_id] = (doc.filetype, Parser("x")._max_nesting)

        configs = [
            ParseConfig(default_filetype="note", max_nesting=1),
            ParseConfig(default_filetype="project", max_nesting=2),
            ParseConfig(default_filetype="context", max_nesting=3),
        ]
        threads = [Thread(target=worker, args=(i, c)) for i, c in enumerate(configs)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results == {0: ("note", 1), 1: ("project", 2), 2: ("context", 3)}
