"""Tests for diagnostics collection and policy controls."""

from __future__ import annotations

import warnings

import pytest

from tokensmith.diagnostics import (
    CYCLE,
    KNOWN_CODES,
    MISSING_REFERENCE,
    UNKNOWN_SET,
    DiagnosticCollector,
    DiagnosticPolicy,
    TokenWarning,
    parse_code_list,
)
from tokensmith.errors import CycleDetectedError, UnresolvedReferenceError


class TestParseCodeList:
    def test_single_code(self):
        assert parse_code_list("T01") == frozenset({"T01"})

    def test_multiple_codes(self):
        assert parse_code_list("T01,T02") == frozenset({"T01", "T02"})

    def test_whitespace_stripped(self):
        assert parse_code_list("T01 , T03") == frozenset({"T01", "T03"})

    def test_empty_string(self):
        assert parse_code_list("") == frozenset()

    def test_unknown_code_rejected(self):
        with pytest.raises(ValueError, match="Unknown diagnostic code.*T99"):
            parse_code_list("T99")


class TestDiagnosticCollector:
    def test_default_records_and_warns(self):
        collector = DiagnosticCollector()
        with warnings.catch_warnings(record=True) as w:
            warnings.simplefilter("always")
            collector.emit(MISSING_REFERENCE, ("a", "b"), "a references b")
        assert len(w) == 1
        assert issubclass(w[0].category, TokenWarning)
        assert "[T03]" in str(w[0].message)
        assert len(collector) == 1
        assert collector.diagnostics[0].paths == ("a", "b")

    def test_emit_warnings_disabled(self):
        collector = DiagnosticCollector(emit_warnings=False)
        with warnings.catch_warnings(record=True) as w:
            warnings.simplefilter("always")
            collector.emit(UNKNOWN_SET, ("nope",), "missing set")
        assert len(w) == 0
        assert len(collector) == 1

    def test_suppressed(self):
        collector = DiagnosticCollector(DiagnosticPolicy(suppress=frozenset({"T01"})))
        assert collector.emit(UNKNOWN_SET, ("nope",), "missing set") is None
        assert collector.diagnostics == ()

    def test_duplicates_collapsed(self):
        collector = DiagnosticCollector(emit_warnings=False)
        collector.emit(MISSING_REFERENCE, ("a", "b"), "same")
        collector.emit(MISSING_REFERENCE, ("a", "b"), "same")
        assert len(collector) == 1

    def test_warn_as_error(self):
        collector = DiagnosticCollector(DiagnosticPolicy(warn_as_error=frozenset({"T03"})))
        with pytest.raises(UnresolvedReferenceError, match=r"\[T03\]") as excinfo:
            collector.emit(MISSING_REFERENCE, ("a", "b"), "a references b")
        assert excinfo.value.paths == ("a", "b")
        assert len(excinfo.value.diagnostics) == 1

    def test_strict_escalates_everything(self):
        collector = DiagnosticCollector(DiagnosticPolicy(strict=True), emit_warnings=False)
        with pytest.raises(CycleDetectedError):
            collector.emit(CYCLE, ("a", "b"), "cycle")

    def test_error_carries_earlier_diagnostics(self):
        policy = DiagnosticPolicy(warn_as_error=frozenset({"T02"}))
        collector = DiagnosticCollector(policy, emit_warnings=False)
        collector.emit(UNKNOWN_SET, ("x",), "missing set")
        with pytest.raises(CycleDetectedError) as excinfo:
            collector.emit(CYCLE, ("a",), "cycle")
        kinds = [d.kind for d in excinfo.value.diagnostics]
        assert kinds == [UNKNOWN_SET, CYCLE]


class TestDiagnostic:
    def test_to_dict(self):
        collector = DiagnosticCollector(emit_warnings=False)
        diag = collector.emit(CYCLE, ("a", "b"), "a -> b -> a")
        assert diag.to_dict() == {
            "kind": "cycle",
            "code": "T02",
            "paths": ["a", "b"],
            "detail": "a -> b -> a",
        }


class TestKnownCodes:
    def test_contains_expected_codes(self):
        assert KNOWN_CODES == {"T01", "T02", "T03", "T04", "T05"}
