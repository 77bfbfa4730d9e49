"""Tests for the textual <img src="..."> scan."""

from converters.image_scanner import find_image_urls


class TestFindImageUrls:

    def test_no_images(self):
        assert find_image_urls('<p>no images here</p>') == []

    def test_empty_and_missing_body(self):
        assert find_image_urls('') == []
        assert find_image_urls(None) == []

    def test_urls_in_document_order(self):
        html = (
            '<h1>Diagrams</h1>'
            '<p><img src="http://x/first.png"></p>'
            '<p>text</p>'
            '<img src="http://x/second.jpg" alt="second">'
            '<div><img src="/download/third.gif"/></div>'
        )

        assert find_image_urls(html) == [
            'http://x/first.png',
            'http://x/second.jpg',
            '/download/third.gif',
        ]

    def test_duplicates_are_kept(self):
        html = '<img src="http://x/a.png"><img src="http://x/a.png">'

        assert find_image_urls(html) == ['http://x/a.png', 'http://x/a.png']

    def test_url_is_not_validated(self):
        assert find_image_urls('<img src="not a url at all">') == ['not a url at all']

    def test_empty_src(self):
        assert find_image_urls('<img src="">') == ['']

    def test_unterminated_src_ends_scan(self):
        html = '<img src="http://x/a.png"><img src="http://x/broken'

        assert find_image_urls(html) == ['http://x/a.png']

    def test_other_attribute_order_is_not_matched(self):
        assert find_image_urls('<img alt="logo" src="http://x/logo.png">') == []

    def test_single_quotes_are_not_matched(self):
        assert find_image_urls("<img src='http://x/logo.png'/>") == []

    def test_storage_format_attachments_are_not_matched(self):
        html = '<ac:image><ri:attachment ri:filename="diagram.png" /></ac:image>'

        assert find_image_urls(html) == []
