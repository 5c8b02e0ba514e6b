"""
Level policy unit tests.

Covers name resolution, the unknown-level fallback, the filtering order with
its equivalences, and filter string parsing.
"""

from __future__ import annotations

import pytest

from logmux.levels import Severity, allows, parse_filters, resolve_level, split_filter_string


class TestResolveLevel:
    """Level name resolution"""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("trace", Severity.TRACE),
            ("DEBUG", Severity.DEBUG),
            ("Info", Severity.INFO),
            ("warn", Severity.WARN),
            ("ERROR", Severity.ERROR),
            (" critical ", Severity.CRITICAL),
        ],
    )
    def test_known_names_any_case(self, name, expected, diagnostics) -> None:
        """Known names resolve regardless of case and surrounding spaces"""
        assert resolve_level(name, diagnostics) is expected
        assert diagnostics.calls == []

    def test_unknown_name_falls_back_to_error(self, diagnostics) -> None:
        """Unknown names resolve to error and emit exactly one diagnostic"""
        assert resolve_level("verbose", diagnostics) is Severity.ERROR
        assert len(diagnostics.calls) == 1
        call = diagnostics.calls[0]
        assert call.method_name == "error"
        assert call.args == ("Unknown log level",)
        assert call.kwargs == {"level_name": "verbose"}

    def test_unknown_name_without_injected_logger_writes_to_stderr(self, capsys) -> None:
        """The bootstrap logger reports unknown levels on stderr"""
        assert resolve_level("loud") is Severity.ERROR
        err = capsys.readouterr().err
        assert "level=error" in err
        assert 'msg="Unknown log level"' in err


class TestAllows:
    """Minimum-level comparison"""

    def test_ordering(self) -> None:
        """Severities order from trace to critical"""
        assert allows(Severity.WARN, Severity.INFO)
        assert allows(Severity.INFO, Severity.INFO)
        assert not allows(Severity.DEBUG, Severity.INFO)
        assert not allows(Severity.WARN, Severity.ERROR)

    def test_trace_and_debug_are_equivalent(self) -> None:
        """trace and debug filter the same way"""
        assert allows(Severity.TRACE, Severity.DEBUG)
        assert allows(Severity.DEBUG, Severity.TRACE)

    def test_critical_and_error_are_equivalent(self) -> None:
        """critical and error filter the same way"""
        assert allows(Severity.ERROR, Severity.CRITICAL)
        assert allows(Severity.CRITICAL, Severity.ERROR)
        assert not allows(Severity.WARN, Severity.CRITICAL)


class TestFilters:
    """Filter string parsing"""

    def test_split_on_commas_and_spaces(self) -> None:
        """Filter strings split on commas and spaces"""
        assert split_filter_string("a:warn, b:debug  c:info") == ["a:warn", "b:debug", "c:info"]
        assert split_filter_string("") == []
        assert split_filter_string(None) == []

    def test_unknown_level_still_registers(self, diagnostics) -> None:
        """'b:bogus' registers through the unknown-level fallback"""
        filters = parse_filters(["a:warn", "b:bogus"], diagnostics)
        assert filters == {"a": Severity.WARN, "b": Severity.ERROR}
        assert len(diagnostics.calls) == 1

    def test_entries_without_separator_are_dropped(self, diagnostics) -> None:
        """Entries without a colon are ignored"""
        filters = parse_filters(["a:warn", "noseparator"], diagnostics)
        assert filters == {"a": Severity.WARN}
        assert diagnostics.calls == []

    def test_last_entry_for_a_name_wins(self, diagnostics) -> None:
        """A repeated name keeps its last level"""
        assert parse_filters(["a:warn", "a:debug"], diagnostics) == {"a": Severity.DEBUG}
