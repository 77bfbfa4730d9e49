"""
Export report generator for aggregating per-page outcomes.

Builds a summary of a backup run from the PageOutcome list and formats it for
console display or JSON export.
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from models import PageOutcome


class ExportReport:
    """Generates backup reports from page outcomes."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger('confluence_page_backup.orchestrator.report')

    def generate_report(self, outcomes: Sequence[PageOutcome], duration: float) -> Dict[str, Any]:
        """
        Generate backup report.

        Args:
            outcomes: One outcome per requested page, in processing order
            duration: Total run duration in seconds

        Returns:
            Report dictionary with summary, pages and errors sections
        """
        report = {
            'summary': self._build_summary(outcomes, duration),
            'pages': [outcome.to_dict() for outcome in outcomes],
            'errors': self._build_error_summary(outcomes),
            'timestamp': datetime.now().isoformat()
        }

        self.logger.debug(
            f"Report generated: {report['summary']['pages']} pages, "
            f"{report['summary']['pages_failed']} failed"
        )
        return report

    def _build_summary(self, outcomes: Sequence[PageOutcome], duration: float) -> Dict[str, Any]:
        images = [image for outcome in outcomes for image in outcome.images]
        succeeded = sum(1 for outcome in outcomes if outcome.succeeded)

        return {
            'pages': len(outcomes),
            'pages_exported': succeeded,
            'pages_failed': len(outcomes) - succeeded,
            'images_found': len(images),
            'images_saved': sum(1 for image in images if image.succeeded),
            'images_failed': sum(1 for image in images if not image.succeeded),
            'images_size_bytes': sum(image.size_bytes for image in images),
            'success_rate': (succeeded / len(outcomes)) if outcomes else 0.0,
            'duration_seconds': duration,
            'duration_formatted': self._format_duration(duration)
        }

    def _build_error_summary(self, outcomes: Sequence[PageOutcome]) -> List[Dict[str, Any]]:
        """Collect page-scoped and image-scoped errors in processing order."""
        errors = []
        for outcome in outcomes:
            if outcome.error is not None:
                errors.append({
                    'scope': 'page',
                    'page_id': outcome.page_id,
                    'stage': outcome.failed_stage.value if outcome.failed_stage else None,
                    'error_type': type(outcome.error).__name__,
                    'message': str(outcome.error)
                })
            for image in outcome.failed_images:
                errors.append({
                    'scope': 'image',
                    'page_id': outcome.page_id,
                    'url': image.url,
                    'error_type': type(image.error).__name__,
                    'message': str(image.error)
                })
        return errors

    def _format_duration(self, seconds: float) -> str:
        """Format duration in human-readable format."""
        if seconds < 60:
            return f"{seconds:.1f}s"
        minutes, seconds = divmod(int(seconds), 60)
        if minutes < 60:
            return f"{minutes}m {seconds}s"
        hours, minutes = divmod(minutes, 60)
        return f"{hours}h {minutes}m {seconds}s"

    def format_console_report(self, report: Dict[str, Any]) -> str:
        """
        Format report for console display.

        Args:
            report: Report dictionary

        Returns:
            Formatted console string
        """
        summary = report.get('summary', {})
        sections = [
            "=" * 60,
            "BACKUP REPORT",
            "=" * 60,
            "",
            "Summary:",
            f"  Pages:       {summary.get('pages', 0)}",
            f"  Exported:    {summary.get('pages_exported', 0)}",
            f"  Failed:      {summary.get('pages_failed', 0)}",
            f"  Images:      {summary.get('images_saved', 0)} saved, {summary.get('images_failed', 0)} failed",
            f"  Duration:    {summary.get('duration_formatted', '0s')}",
            f"  Success:     {summary.get('success_rate', 0.0) * 100:.1f}%",
        ]

        errors = report.get('errors', [])
        if errors:
            sections.append("")
            sections.append(f"Errors ({len(errors)}):")
            sections.append("-" * 60)
            for error in errors:
                if error['scope'] == 'page':
                    sections.append(f"  [page {error['page_id']}] {error['stage']}: {error['message']}")
                else:
                    sections.append(f"  [page {error['page_id']}] image {error['url']}: {error['message']}")

        sections.append("=" * 60)
        return '\n'.join(sections)

    def export_json_report(self, report: Dict[str, Any], filepath: str) -> None:
        """
        Export report to JSON file.

        Args:
            report: Report dictionary
            filepath: Output file path

        Raises:
            OSError: If the file cannot be written
        """
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(report, f, indent=2, ensure_ascii=False, default=str)

        self.logger.info(f"JSON report exported to {filepath}")


__all__ = ['ExportReport']
