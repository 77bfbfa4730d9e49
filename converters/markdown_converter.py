"""GitHub-flavoured Markdown converter for Confluence storage-format HTML."""

import logging
import re
from typing import List, Optional

from bs4 import BeautifulSoup, Comment, NavigableString, Tag
from markdownify import MarkdownConverter as MarkdownifyConverter

from errors import ConversionError

logger = logging.getLogger('confluence_page_backup.converters.markdown_converter')


class MarkdownConverter(MarkdownifyConverter):
    """
    Convert Confluence storage-format HTML to GitHub-flavoured Markdown.

    This class extends markdownify.MarkdownConverter with:
    - Fenced code blocks with language hints
    - Task lists from checkboxes and ac:task-list elements
    - Pipe tables with the first row used as header
    - Whitespace normalisation of the final document
    """

    def __init__(self, logger: Optional[logging.Logger] = None, **kwargs):
        """Initialize markdown converter with logger and markdownify options."""
        markdownify_options = {
            'heading_style': 'ATX',  # Use # for headings
            'bullets': '-',  # Use - for unordered lists
            'strong_em_symbol': '*',
            'escape_asterisks': False,
            'escape_underscores': False,
            'escape_misc': False,
            'wrap': False
        }
        markdownify_options.update(kwargs)
        super().__init__(**markdownify_options)

        self.logger = logger or logging.getLogger('confluence_page_backup.converters.markdown_converter')

    def convert(self, html_content: str) -> str:
        """
        Convert an HTML body to Markdown.

        Args:
            html_content: Storage-format HTML

        Returns:
            Markdown text ending in a single newline, or "" for empty input

        Raises:
            ConversionError: If the input is not text or cannot be parsed
        """
        if not isinstance(html_content, str):
            raise ConversionError(
                f"cannot convert {type(html_content).__name__} to markdown, expected str"
            )
        if not html_content.strip():
            return ''

        self.logger.debug(f"Converting {len(html_content)} chars of HTML to markdown")
        try:
            soup = self._parse_html(html_content)
            self._pre_process_html(soup)
            raw_markdown = self.convert_soup(soup)
        except ConversionError:
            raise
        except Exception as e:
            raise ConversionError(f"failed to convert HTML to markdown: {e}") from e

        return self._post_process_markdown(raw_markdown)

    def _parse_html(self, html_content: str) -> BeautifulSoup:
        """Parse HTML content with BeautifulSoup."""
        return BeautifulSoup(html_content, 'lxml')

    def _pre_process_html(self, soup: BeautifulSoup) -> None:
        """Rewrite storage-format constructs into plain HTML before conversion."""
        self._process_task_lists(soup)
        self._process_checkboxes(soup)
        soup.smooth()

    def _process_task_lists(self, soup: BeautifulSoup) -> None:
        """Turn ac:task-list/ac:task elements into list items with task markers."""
        for task in soup.find_all('ac:task'):
            status = task.find('ac:task-status')
            body = task.find('ac:task-body')
            done = status is not None and status.get_text(strip=True) == 'complete'

            item = soup.new_tag('li')
            item.append(NavigableString('[x] ' if done else '[ ] '))
            if body is not None:
                for child in list(body.contents):
                    item.append(child.extract())
            task.replace_with(item)

        for task_list in soup.find_all('ac:task-list'):
            task_list.name = 'ul'

    def _process_checkboxes(self, soup: BeautifulSoup) -> None:
        """Replace checkbox inputs with GitHub task-list markers."""
        for checkbox in soup.find_all('input'):
            if str(checkbox.get('type', '')).lower() != 'checkbox':
                continue
            marker = '[x] ' if checkbox.has_attr('checked') else '[ ] '
            checkbox.replace_with(NavigableString(marker))

    def _post_process_markdown(self, markdown: str) -> str:
        """Normalise line endings and blank lines of generated markdown."""
        markdown = markdown.replace('\r\n', '\n').replace('\r', '\n')

        # Remove trailing whitespace outside code fences
        lines = []
        in_code_block = False
        for line in markdown.split('\n'):
            if line.strip().startswith('```'):
                in_code_block = not in_code_block
            lines.append(line if in_code_block else line.rstrip())
        markdown = '\n'.join(lines)

        markdown = self._final_cleanup(markdown)
        return markdown + '\n' if markdown else ''

    def _final_cleanup(self, markdown: str) -> str:
        """Final cleanup pass - collapse blank line runs and trim the document."""
        markdown = re.sub(r'\n{3,}', '\n\n', markdown)
        return markdown.strip('\n')

    convert_strike = MarkdownifyConverter.convert_del

    def convert_table(self, el, text, parent_tags=None, **kwargs):
        """Render a table as a pipe table, using the first row as header."""
        rows = [row for row in el.find_all('tr') if row.find_parent('table') is el]
        if not rows:
            return ''

        header_cells = self._row_cells(rows[0])
        if not header_cells:
            return ''

        width = len(header_cells)
        markdown_rows = [
            self._format_row([self._get_cell_text(cell) for cell in header_cells], width),
            '| ' + ' | '.join('---' for _ in range(width)) + ' |'
        ]

        for row in rows[1:]:
            cells = self._row_cells(row)
            if cells:
                markdown_rows.append(self._format_row([self._get_cell_text(cell) for cell in cells], width))

        return '\n\n' + '\n'.join(markdown_rows) + '\n\n'

    @staticmethod
    def _row_cells(row: Tag) -> List[Tag]:
        return row.find_all(['th', 'td'], recursive=False)

    @staticmethod
    def _format_row(cells: List[str], width: int) -> str:
        # Pad short rows so every row has the header's column count
        cells = cells + [''] * (width - len(cells))
        return '| ' + ' | '.join(cells) + ' |'

    def _get_cell_text(self, cell: Tag) -> str:
        """Convert cell contents to single-line markdown with pipes escaped."""
        # '_inline' keeps block children (lists, headings, breaks) on one line
        parent_tags = {cell.name, '_inline'}
        parts = []
        for child in cell.children:
            if isinstance(child, Comment):
                continue
            if isinstance(child, NavigableString):
                parts.append(self.process_text(child, parent_tags=parent_tags))
            else:
                parts.append(self.process_tag(child, parent_tags=parent_tags))
        text = ' '.join(''.join(parts).split())
        return text.replace('|', '\\|')

    def convert_pre(self, el, text, parent_tags=None, **kwargs):
        """Render pre elements as fenced code blocks."""
        code_el = el.find('code')
        language = self._extract_code_language(code_el) if code_el else ''
        if not language:
            language = self._extract_code_language(el)

        code_text = (code_el or el).get_text().strip('\n')
        return f"\n\n```{language}\n{code_text}\n```\n\n"

    def _extract_code_language(self, element: Tag) -> str:
        """Extract programming language from a code or pre element."""
        for cls in element.get('class', []):
            if str(cls).startswith('language-'):
                return str(cls).replace('language-', '')
            if str(cls).startswith('lang-'):
                return str(cls).replace('lang-', '')

        lang = element.get('data-language')
        if lang:
            return lang
        return ''


def convert_html(html_content: str, logger: Optional[logging.Logger] = None) -> str:
    """Convenience function to convert one HTML body to Markdown."""
    return MarkdownConverter(logger=logger).convert(html_content)


__all__ = ['MarkdownConverter', 'convert_html']
