"""Tests for logging setup and run progress tracking."""

import logging

import pytest

from errors import APIError, ImageDownloadError
from logger import LOGGER_NAME, ProgressTracker, log_config, setup_logging
from models import FailureStage, ImageOutcome, PageOutcome, PageState


def exported_page(page_id, image_errors=0, images_saved=0):
    images = [ImageOutcome(url=f'http://x/{i}.png', size_bytes=1) for i in range(images_saved)]
    images += [
        ImageOutcome(url=f'http://x/bad{i}.png', error=ImageDownloadError("404", url=f'http://x/bad{i}.png'))
        for i in range(image_errors)
    ]
    return PageOutcome(page_id=page_id, state=PageState.IMAGES_PROCESSED, images=images)


def failed_page(page_id):
    return PageOutcome(page_id=page_id).fail(FailureStage.FETCH, APIError("404", 404, page_id))


@pytest.fixture
def captured_logs(caplog):
    caplog.set_level(logging.INFO, logger=LOGGER_NAME)
    return caplog


class TestProgressTracker:

    def test_counts_pages_and_images(self):
        with ProgressTracker(3) as tracker:
            tracker.record(exported_page('1', images_saved=2, image_errors=1))
            tracker.record(failed_page('2'))
            tracker.record(exported_page('3'))

        assert tracker.pages_exported == 2
        assert tracker.pages_failed == 1
        assert tracker.pages_processed == 3
        assert tracker.images_saved == 2
        assert tracker.images_failed == 1

    def test_failed_page_is_logged_with_stage(self, captured_logs):
        with ProgressTracker(2) as tracker:
            tracker.record(failed_page('7'))

        messages = [r.getMessage() for r in captured_logs.records]
        assert 'Processed 1/2 pages - Last: 7 Failed (fetch)' in messages

    @pytest.mark.parametrize('outcomes, level', [
        ([exported_page('1')], logging.INFO),
        ([exported_page('1', image_errors=1)], logging.WARNING),
        ([exported_page('1'), failed_page('2')], logging.WARNING),
        ([failed_page('1')], logging.ERROR),
    ])
    def test_summary_level_follows_failures(self, captured_logs, outcomes, level):
        with ProgressTracker(len(outcomes)) as tracker:
            for outcome in outcomes:
                tracker.record(outcome)

        summary = [r for r in captured_logs.records if r.getMessage().startswith('Images:')]
        assert [r.levelno for r in summary] == [level]


@pytest.mark.usefixtures('reset_package_logger')
class TestSetupLogging:

    @pytest.mark.parametrize('verbosity, level', [(0, logging.WARNING), (1, logging.INFO), (2, logging.DEBUG)])
    def test_verbosity_sets_level(self, verbosity, level):
        assert setup_logging(verbosity=verbosity).level == level

    def test_explicit_level_wins(self):
        assert setup_logging(verbosity=2, level='error').level == logging.ERROR

    def test_invalid_level_raises(self):
        with pytest.raises(ValueError):
            setup_logging(level='LOUD')

    def test_log_file_receives_records(self, tmp_path):
        log_file = tmp_path / 'backup.log'
        logger = setup_logging(verbosity=1, log_file=str(log_file))

        logger.info("written to file")
        for handler in logger.handlers:
            handler.flush()

        assert 'written to file' in log_file.read_text(encoding='utf-8')

    def test_repeated_setup_does_not_stack_handlers(self):
        setup_logging()
        logger = setup_logging()

        assert len(logger.handlers) == 1


class TestLogConfig:

    def test_token_is_redacted(self, sample_config, captured_logs):
        log_config(sample_config)

        text = '\n'.join(r.getMessage() for r in captured_logs.records)
        assert 's3cret-token' not in text
        assert 'API Token: ***REDACTED***' in text
        assert 'Page IDs (1): 123' in text
