"""Data models for the Confluence page backup pipeline."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger('confluence_page_backup')


class PageState(Enum):
    """Lifecycle states of a single page export."""
    PENDING = "pending"
    FETCHED = "fetched"
    DIRECTORY_READY = "directory_ready"
    MARKDOWN_SAVED = "markdown_saved"
    IMAGES_PROCESSED = "images_processed"
    FAILED = "failed"


class FailureStage(Enum):
    """Pipeline stage at which a page export failed."""
    FETCH = "fetch"
    MKDIR = "mkdir"
    MARKDOWN = "markdown"


@dataclass(frozen=True)
class Credential:
    """Pre-issued Basic auth credential pair (email/username and API token)."""

    identity: str
    secret: str = field(repr=False)

    def as_auth(self) -> tuple:
        """Return the credential as a requests auth tuple."""
        return (self.identity, self.secret)


@dataclass(frozen=True)
class Page:
    """A fetched Confluence page with its storage-format body."""

    page_id: str
    title: str
    body: str  # storage-format HTML


@dataclass(frozen=True)
class ExportTarget:
    """On-disk location of one exported page."""

    directory: Path
    sanitized_title: str

    @property
    def markdown_path(self) -> Path:
        return self.directory / f"{self.sanitized_title}.md"


@dataclass
class StageResult:
    """Outcome of one pipeline stage: either a value or the error that stopped it."""

    value: Any = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class ImageOutcome:
    """Result of downloading one image reference."""

    url: str
    path: Optional[Path] = None
    error: Optional[Exception] = None
    size_bytes: int = 0

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize image outcome to dictionary."""
        return {
            'url': self.url,
            'path': str(self.path) if self.path else None,
            'size_bytes': self.size_bytes,
            'error': str(self.error) if self.error else None
        }


@dataclass
class PageOutcome:
    """Tracks a page through the export state machine."""

    page_id: str
    state: PageState = PageState.PENDING
    failed_stage: Optional[FailureStage] = None
    title: Optional[str] = None
    target: Optional[ExportTarget] = None
    images: List[ImageOutcome] = field(default_factory=list)
    error: Optional[Exception] = None

    def advance(self, state: PageState) -> None:
        """Move to the next state of a successful export."""
        logger.debug(f"Page {self.page_id}: {self.state.value} -> {state.value}")
        self.state = state

    def fail(self, stage: FailureStage, error: Exception) -> 'PageOutcome':
        """Mark the page as failed at the given stage."""
        self.state = PageState.FAILED
        self.failed_stage = stage
        self.error = error
        return self

    @property
    def succeeded(self) -> bool:
        return self.state == PageState.IMAGES_PROCESSED

    @property
    def failed_images(self) -> List[ImageOutcome]:
        return [image for image in self.images if not image.succeeded]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize page outcome to dictionary."""
        return {
            'page_id': self.page_id,
            'title': self.title,
            'state': self.state.value,
            'failed_stage': self.failed_stage.value if self.failed_stage else None,
            'error': str(self.error) if self.error else None,
            'directory': str(self.target.directory) if self.target else None,
            'markdown_file': str(self.target.markdown_path) if self.target and self.state != PageState.FAILED else None,
            'images': [image.to_dict() for image in self.images]
        }


__all__ = [
    'PageState',
    'FailureStage',
    'Credential',
    'Page',
    'ExportTarget',
    'StageResult',
    'ImageOutcome',
    'PageOutcome'
]
