"""Tests for filesystem-safe page and image naming."""

from pathlib import Path

import pytest

from exporters.file_naming import export_target_for, image_filename, sanitize_filename
from models import Page

DISALLOWED = '/\\:*?"<>|'


class TestSanitizeFilename:
    """Test title sanitization."""

    @pytest.mark.parametrize('char', list(DISALLOWED))
    def test_each_disallowed_character_is_replaced(self, char):
        assert sanitize_filename(f"a{char}b") == "a_b"

    def test_mixed_title_keeps_other_characters_in_order(self):
        title = 'Q3: Plan <draft> "v2" / notes | 50% * done?'
        result = sanitize_filename(title)

        assert not any(char in result for char in DISALLOWED)
        assert result == 'Q3_ Plan _draft_ _v2_ _ notes _ 50% _ done_'
        assert len(result) == len(title)

    def test_unicode_is_untouched(self):
        assert sanitize_filename('設計メモ – Überblick') == '設計メモ – Überblick'

    def test_empty_string(self):
        assert sanitize_filename('') == ''

    def test_only_disallowed_characters(self):
        assert sanitize_filename('/\\:') == '___'

    @pytest.mark.parametrize('title', ['', 'plain', 'a/b\\c', '<<>>', 'emoji 🚀 | rocket', '__'])
    def test_idempotent(self, title):
        once = sanitize_filename(title)
        assert sanitize_filename(once) == once


class TestExportTarget:
    """Test directory and markdown file layout."""

    def test_directory_name_appends_page_id(self, tmp_path):
        target = export_target_for(tmp_path, Page(page_id='123', title='My/Page', body=''))

        assert target.directory == tmp_path / 'My_Page(123)'
        assert target.sanitized_title == 'My_Page'
        assert target.markdown_path == tmp_path / 'My_Page(123)' / 'My_Page.md'

    def test_same_title_different_ids_never_collide(self):
        first = export_target_for('backup', Page(page_id='1', title='Notes', body=''))
        second = export_target_for('backup', Page(page_id='2', title='Notes', body=''))

        assert first.directory != second.directory

    def test_empty_title_still_has_a_directory_name(self):
        target = export_target_for('backup', Page(page_id='42', title='', body=''))

        assert target.directory == Path('backup') / '(42)'


class TestImageFilename:
    """Test file names derived from image URLs."""

    def test_last_path_segment(self):
        assert image_filename('http://x/a.png') == 'a.png'

    def test_query_and_fragment_are_dropped(self):
        assert image_filename('https://wiki/download/attachments/1/b.png?version=1&api=v2#top') == 'b.png'

    def test_percent_encoding_is_decoded(self):
        assert image_filename('https://wiki/files/my%20diagram.png') == 'my diagram.png'

    def test_reserved_characters_are_sanitized(self):
        assert image_filename('https://wiki/files/a%3Ab.png') == 'a_b.png'

    def test_directory_url_has_no_file_name(self):
        assert image_filename('https://wiki/files/') == ''
