"""
Orchestration package for the page backup pipeline.

This package sequences the per-page phases: Fetch → Directory → Markdown →
Images, and aggregates the outcomes into a report.
"""

from .export_orchestrator import ExportOrchestrator
from .export_report import ExportReport

__all__ = [
    'ExportOrchestrator',
    'ExportReport'
]
