"""Reporting module - JSON reports."""

from .json_reporter import JsonReporter

__all__ = ["JsonReporter"]
