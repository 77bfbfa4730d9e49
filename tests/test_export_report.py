"""Tests for run summaries built from page outcomes."""

import json
from pathlib import Path

import pytest

from errors import APIError, ImageDownloadError
from models import ExportTarget, FailureStage, ImageOutcome, PageOutcome, PageState
from orchestrator import ExportReport


@pytest.fixture
def outcomes():
    exported = PageOutcome(
        page_id='1',
        state=PageState.IMAGES_PROCESSED,
        title='Exported',
        target=ExportTarget(directory=Path('/backup/Exported(1)'), sanitized_title='Exported'),
        images=[
            ImageOutcome(url='http://x/a.png', path=Path('/backup/Exported(1)/a.png'), size_bytes=10),
            ImageOutcome(url='http://x/b.png', error=ImageDownloadError("failed to download image http://x/b.png: 404")),
        ]
    )
    failed = PageOutcome(page_id='2').fail(FailureStage.FETCH, APIError("failed to fetch page 2: 404 Not Found", 404, '2'))
    return [exported, failed]


class TestExportReport:

    def test_summary_counts(self, outcomes):
        summary = ExportReport().generate_report(outcomes, 1.5)['summary']

        assert summary['pages'] == 2
        assert summary['pages_exported'] == 1
        assert summary['pages_failed'] == 1
        assert summary['images_found'] == 2
        assert summary['images_saved'] == 1
        assert summary['images_failed'] == 1
        assert summary['images_size_bytes'] == 10
        assert summary['success_rate'] == 0.5
        assert summary['duration_formatted'] == '1.5s'

    def test_errors_are_scoped(self, outcomes):
        errors = ExportReport().generate_report(outcomes, 0)['errors']

        assert [(e['scope'], e['page_id']) for e in errors] == [('image', '1'), ('page', '2')]
        assert errors[0]['url'] == 'http://x/b.png'
        assert errors[1]['stage'] == 'fetch'
        assert errors[1]['error_type'] == 'APIError'

    def test_pages_keep_processing_order(self, outcomes):
        pages = ExportReport().generate_report(outcomes, 0)['pages']

        assert [page['page_id'] for page in pages] == ['1', '2']
        assert pages[0]['markdown_file'] == str(Path('/backup/Exported(1)/Exported.md'))
        assert pages[1]['markdown_file'] is None
        assert pages[1]['state'] == 'failed'

    def test_empty_run(self):
        summary = ExportReport().generate_report([], 0)['summary']

        assert summary['pages'] == 0
        assert summary['success_rate'] == 0.0

    def test_console_report_lists_errors(self, outcomes):
        report_generator = ExportReport()
        text = report_generator.format_console_report(report_generator.generate_report(outcomes, 75))

        assert 'BACKUP REPORT' in text
        assert 'Duration:    1m 15s' in text
        assert '[page 2] fetch: failed to fetch page 2: 404 Not Found' in text
        assert '[page 1] image http://x/b.png' in text

    def test_json_export(self, outcomes, tmp_path):
        report_generator = ExportReport()
        path = tmp_path / 'report.json'

        report_generator.export_json_report(report_generator.generate_report(outcomes, 0), str(path))

        data = json.loads(path.read_text(encoding='utf-8'))
        assert data['summary']['pages_failed'] == 1
        assert data['pages'][0]['images'][0]['path'] == str(Path('/backup/Exported(1)/a.png'))

    def test_json_export_to_missing_directory_raises(self, outcomes, tmp_path):
        report_generator = ExportReport()

        with pytest.raises(OSError):
            report_generator.export_json_report({}, str(tmp_path / 'missing' / 'report.json'))
