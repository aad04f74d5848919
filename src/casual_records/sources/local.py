"""
Local directory scrape source.

Walks a directory tree, reads every eligible file and hands the bytes to a
ContentExtractor. Unreadable files and failed extractions are reported as
items; only an unusable root directory ends the walk early.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional, Set, Tuple

from casual_records.errors import ScrapeError
from casual_records.extractors.base import ContentExtractor
from casual_records.models import Record
from casual_records.sources.stream import DEFAULT_BUFFER_SIZE, Emit, ScrapeItem, ScrapeStream

logger = logging.getLogger(__name__)


def generate_title(filename: str) -> str:
    """'dentist_visit-2024.txt' -> 'Dentist Visit 2024'"""
    stem = Path(filename).stem.replace("_", " ").replace("-", " ")
    return " ".join(word[:1].upper() + word[1:].lower() for word in stem.split())


class LocalDirectorySource:
    """Scrapes records from files under a base directory."""

    def __init__(
        self,
        extractor: ContentExtractor,
        base_path: str | Path,
        name: str = "local",
        extensions: Optional[Iterable[str]] = None,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
    ):
        """
        Initialize the source.

        Args:
            extractor: Turns raw file bytes into classified records
            base_path: Root directory to walk
            name: Source name, also added as a tag on scraped records
            extensions: Optional allow-list of file extensions (".txt", "png", ...)
            buffer_size: Capacity of the stream queue
        """
        self.extractor = extractor
        self.base_path = Path(base_path)
        self._name = name
        self.extensions: Optional[Set[str]] = (
            {ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in extensions}
            if extensions
            else None
        )
        self.buffer_size = buffer_size

    @property
    def name(self) -> str:
        return self._name

    def scrape(self) -> ScrapeStream:
        return ScrapeStream(self._name, self._walk, buffer_size=self.buffer_size)

    def _is_eligible(self, path: Path) -> bool:
        if path.name.startswith("."):
            return False
        return self.extensions is None or path.suffix.lower() in self.extensions

    def _list_files(self) -> Tuple[List[Path], List[OSError]]:
        files: List[Path] = []
        errors: List[OSError] = []

        for dirpath, dirnames, filenames in os.walk(self.base_path, onerror=errors.append):
            # hidden directories are skipped, order is deterministic
            dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
            for filename in sorted(filenames):
                path = Path(dirpath) / filename
                if self._is_eligible(path):
                    files.append(path)

        return files, errors

    async def _walk(self, emit: Emit) -> None:
        root = self.base_path
        if not root.is_dir():
            raise ScrapeError(
                f"base path does not exist or is not a directory: {root}", path=str(root), fatal=True
            )

        files, walk_errors = await asyncio.to_thread(self._list_files)

        for error in walk_errors:
            if error.filename and Path(error.filename) == root:
                raise ScrapeError(f"failed to walk directory {root}: {error}", path=str(root), fatal=True)
            await emit(
                ScrapeItem(
                    path=error.filename,
                    error=ScrapeError(f"failed to read directory {error.filename}: {error}", path=error.filename),
                )
            )

        logger.info(f"Scraping {len(files)} files from {root} (source={self._name})")

        for path in files:
            await emit(await self._scrape_file(path))

    async def _scrape_file(self, path: Path) -> ScrapeItem:
        location = str(path)

        try:
            raw = await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            logger.warning(f"Failed to read {location}: {e}")
            return ScrapeItem(
                path=location, error=ScrapeError(f"failed to read file {location}: {e}", path=location)
            )

        try:
            record = await self.extractor.extract(raw)
        except Exception as e:
            logger.warning(f"Failed to extract {location}: {e}")
            return ScrapeItem(
                path=location,
                error=ScrapeError(f"failed to extract record from file {location}: {e}", path=location),
            )

        return ScrapeItem(path=location, record=self._annotate(record, path))

    def _annotate(self, record: Record, path: Path) -> Record:
        metadata = {
            **record.metadata,
            "source": self._name,
            "source_path": str(path),
            "file_name": path.name,
        }
        return record.model_copy(
            update={
                "title": record.title or generate_title(path.name),
                "metadata": metadata,
                "tags": list(dict.fromkeys([*record.tags, "scraped", self._name])),
            }
        )
