"""Validators module - assertion evaluation and value extraction."""

from .assertion_engine import AssertionEngine, AssertionReport, AssertionResult
from .extraction import apply_cast, apply_extractions, extract, lookup

__all__ = [
    "AssertionEngine",
    "AssertionReport",
    "AssertionResult",
    "apply_cast",
    "apply_extractions",
    "extract",
    "lookup",
]
