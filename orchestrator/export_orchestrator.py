"""
Export orchestrator driving the per-page backup pipeline.

For each page ID, in the order given: fetch the page, create its export
directory, convert and save the Markdown body, then download every embedded
image. A page that fails at any stage is reported and skipped; the batch
always moves on to the next page.
"""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from tqdm import tqdm

from config_loader import DEFAULT_BACKUP_DIR, get_nested
from confluence_client import ConfluenceClient
from converters import MarkdownConverter, find_image_urls
from errors import ExportError, FileSystemError
from exporters import AssetDownloader, DEFAULT_CHUNK_SIZE, export_target_for
from fetchers import PageFetcher
from logger import ProgressTracker
from models import (
    ExportTarget,
    FailureStage,
    Page,
    PageOutcome,
    PageState,
    StageResult
)


class ExportOrchestrator:
    """Central coordinator sequencing Fetch → Directory → Markdown → Images for each page."""

    def __init__(
        self,
        config: Dict[str, Any],
        client: Optional[ConfluenceClient] = None,
        logger: Optional[logging.Logger] = None,
        backup_dir: Optional[str] = None,
        show_progress: Optional[bool] = None
    ):
        """
        Initialize export orchestrator.

        Args:
            config: Configuration dictionary
            client: Optional pre-built client; one is created from config otherwise
            logger: Optional logger instance
            backup_dir: Optional backup root override (takes precedence over config)
            show_progress: Optional progress bar override
        """
        self.config = config
        self.logger = logger or logging.getLogger('confluence_page_backup.orchestrator')

        # The orchestrator owns the session unless one was injected
        self._owns_client = client is None
        self.client = client or ConfluenceClient.from_config(config)

        self.backup_dir = Path(backup_dir or get_nested(config, 'export.backup_dir') or DEFAULT_BACKUP_DIR)
        if show_progress is None:
            show_progress = get_nested(config, 'export.show_progress', True)
        self.show_progress = show_progress

        self.page_fetcher = PageFetcher(self.client, logger=self.logger.getChild('fetcher'))
        self.converter = MarkdownConverter(logger=self.logger.getChild('converter'))
        self.asset_downloader = AssetDownloader(
            self.client,
            chunk_size=get_nested(config, 'export.chunk_size', DEFAULT_CHUNK_SIZE),
            logger=self.logger.getChild('assets')
        )

        self.logger.info(f"ExportOrchestrator initialized with backup directory: {self.backup_dir}")

    def export_pages(self, page_ids: Sequence[str]) -> List[PageOutcome]:
        """
        Export every page in order, never stopping on a failed page.

        Args:
            page_ids: Page IDs in the order they should be processed

        Returns:
            One PageOutcome per page ID, in the same order
        """
        outcomes = []
        pages_iter = page_ids
        if self.show_progress:
            pages_iter = tqdm(page_ids, desc="Pages", unit="page", leave=False)

        with ProgressTracker(len(page_ids), logger=self.logger) as tracker:
            for index, page_id in enumerate(pages_iter, start=1):
                self.logger.info(f"Fetching page {index}: {page_id}")
                outcome = self.export_page(page_id)
                tracker.record(outcome)
                outcomes.append(outcome)

        self.logger.info("Completed!")
        return outcomes

    def export_page(self, page_id: str) -> PageOutcome:
        """
        Run the full pipeline for one page.

        Args:
            page_id: Confluence page ID

        Returns:
            PageOutcome in state IMAGES_PROCESSED or FAILED
        """
        outcome = PageOutcome(page_id=page_id)

        fetched = self._attempt(self.page_fetcher.fetch, page_id)
        if not fetched.ok:
            return self._fail(outcome, FailureStage.FETCH, fetched.error)
        page: Page = fetched.value
        outcome.title = page.title
        outcome.advance(PageState.FETCHED)

        target = export_target_for(self.backup_dir, page)
        outcome.target = target
        ready = self._attempt(self._prepare_directory, target)
        if not ready.ok:
            return self._fail(outcome, FailureStage.MKDIR, ready.error)
        outcome.advance(PageState.DIRECTORY_READY)

        saved = self._attempt(self._save_markdown, page, target)
        if not saved.ok:
            return self._fail(outcome, FailureStage.MARKDOWN, saved.error)
        self.logger.info(f"Saved markdown to {target.markdown_path}")
        outcome.advance(PageState.MARKDOWN_SAVED)

        image_urls = find_image_urls(page.body)
        if image_urls:
            self.logger.debug(f"Found {len(image_urls)} image(s) in page {page_id}")
        outcome.images = self.asset_downloader.download_images(image_urls, target.directory)
        for image in outcome.failed_images:
            self.logger.warning(f"Page {page_id}: image {image.url} not saved: {image.error}")
        outcome.advance(PageState.IMAGES_PROCESSED)

        return outcome

    def _attempt(self, stage_fn: Callable[..., Any], *args) -> StageResult:
        """Run one stage and capture its pipeline error as a StageResult."""
        try:
            return StageResult(value=stage_fn(*args))
        except ExportError as e:
            return StageResult(error=e)

    def _fail(self, outcome: PageOutcome, stage: FailureStage, error: Exception) -> PageOutcome:
        self.logger.error(f"Error at stage '{stage.value}' for page {outcome.page_id}: {error}")
        return outcome.fail(stage, error)

    def _prepare_directory(self, target: ExportTarget) -> Path:
        """Create the page directory; an existing directory is fine."""
        try:
            target.directory.mkdir(parents=True, exist_ok=True)
        except (OSError, ValueError) as e:
            raise FileSystemError(f"failed to create directory {target.directory}: {e}") from e
        return target.directory

    def _save_markdown(self, page: Page, target: ExportTarget) -> Path:
        """Convert the page body and write it to {directory}/{title}.md."""
        markdown = self.converter.convert(page.body)
        try:
            with open(target.markdown_path, 'w', encoding='utf-8', newline='\n') as f:
                f.write(markdown)
        except (OSError, ValueError) as e:
            raise FileSystemError(f"failed to write {target.markdown_path}: {e}") from e
        return target.markdown_path

    def close(self) -> None:
        """Release the HTTP session if this orchestrator created it."""
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> 'ExportOrchestrator':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


__all__ = ['ExportOrchestrator']
