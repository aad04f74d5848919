"""
RecordService: one object wiring the store, index, ingestor, discovery and
scraper together, exposing the operations the CLI needs.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from casual_records.config import RecordsConfig
from casual_records.discovery import RecordDiscovery
from casual_records.embeddings import HashingEmbedding
from casual_records.extractors import (
    ContentExtractor,
    FixedTypeClassifier,
    LLMTypeClassifier,
    OCRContentExtractor,
    TypeExtractor,
)
from casual_records.ingestion import RecordIngestor, RecordScraper, ScrapeSummary
from casual_records.models import Record, SearchResult
from casual_records.sources import LocalDirectorySource, ScrapeSource
from casual_records.storage import (
    FileRecordStore,
    InMemoryRecordStore,
    InMemoryVectorIndex,
    RecordStore,
    VectorIndex,
)

logger = logging.getLogger(__name__)


def create_record_store(config: RecordsConfig) -> RecordStore:
    """Build the record store selected by ``config.storage_backend``."""
    if config.storage_backend == "memory":
        return InMemoryRecordStore()
    if config.storage_backend == "sqlite":
        from casual_records.storage.records.sqlalchemy import SQLAlchemyRecordStore

        return SQLAlchemyRecordStore.from_url(config.database_url)
    return FileRecordStore(config.storage_path)


def create_type_extractor(config: RecordsConfig) -> TypeExtractor:
    """LLM classifier when an Ollama endpoint is configured, else everything is "other"."""
    if not config.ollama_endpoint:
        logger.info("No OLLAMA_ENDPOINT configured, records will be typed 'other'")
        return FixedTypeClassifier()

    from casual_llm import ModelConfig, Provider, create_provider

    llm_provider = create_provider(
        ModelConfig(
            name=config.llm_model,
            provider=Provider.OLLAMA,
            base_url=config.ollama_endpoint,
        )
    )
    return LLMTypeClassifier(llm_provider, model_name=config.llm_model)


class RecordService:
    """
    Facade over the record pipeline.

    Example:
        service = RecordService.from_config(RecordsConfig.from_env())
        await service.reindex()
        results = await service.search("dentist")
        service.close()
    """

    def __init__(
        self,
        record_store: RecordStore,
        vector_index: VectorIndex,
        extractor: Optional[ContentExtractor] = None,
        search_limit: int = 10,
        timeout_seconds: Optional[float] = None,
    ):
        """
        Initialize the service.

        Args:
            record_store: Durable record store
            vector_index: Vector index kept in sync by the ingestor
            extractor: Content extractor for files (needed by ingest_file/scrape_paths)
            search_limit: Default number of search results
            timeout_seconds: Default wall-clock limit for scrape runs
        """
        self.record_store = record_store
        self.vector_index = vector_index
        self.extractor = extractor
        self.search_limit = search_limit
        self.timeout_seconds = timeout_seconds

        self.ingestor = RecordIngestor(record_store, vector_index)
        self.discovery = RecordDiscovery(record_store, vector_index)
        self.scraper = RecordScraper(self.ingestor)

    @classmethod
    def from_config(
        cls,
        config: RecordsConfig,
        extractor: Optional[ContentExtractor] = None,
    ) -> "RecordService":
        """Build a service (store, index and extractor) from configuration."""
        record_store = create_record_store(config)
        vector_index = InMemoryVectorIndex(HashingEmbedding(config.embedding_dimension))
        if extractor is None:
            extractor = OCRContentExtractor(create_type_extractor(config))

        logger.info(f"RecordService created (backend={config.storage_backend})")
        return cls(
            record_store,
            vector_index,
            extractor=extractor,
            search_limit=config.search_limit,
            timeout_seconds=config.timeout_seconds,
        )

    async def ingest(self, record: Record) -> Record:
        return await self.ingestor.ingest(record)

    async def ingest_file(self, path: str | Path, **overrides: Any) -> Record:
        """
        Extract a record from a file and upsert it.

        Args:
            path: File to read
            **overrides: Record fields that replace the extracted ones (type, title, tags, ...)
        """
        if self.extractor is None:
            raise RuntimeError("RecordService has no content extractor configured")

        path = Path(path)
        raw = await asyncio.to_thread(path.read_bytes)
        record = await self.extractor.extract(raw)

        metadata = {**record.metadata, "source_path": str(path), "file_name": path.name}
        updates = {"metadata": metadata, **{k: v for k, v in overrides.items() if v is not None}}
        record = Record.model_validate({**record.model_dump(), **updates})

        return await self.ingestor.ingest(record)

    async def search(
        self,
        query: str,
        filters: Optional[Dict[str, Any]] = None,
        limit: Optional[int] = None,
    ) -> List[SearchResult]:
        return await self.discovery.search(
            query, filters=filters, limit=self.search_limit if limit is None else limit
        )

    async def list(self, record_type: Optional[str] = None) -> List[Record]:
        return await asyncio.to_thread(self.record_store.list, record_type)

    async def get(self, record_id: str) -> Record:
        return await asyncio.to_thread(self.record_store.get, record_id)

    async def delete(self, record_id: str) -> None:
        await self.ingestor.delete(record_id)

    async def reindex(self) -> int:
        return await self.ingestor.reindex()

    async def scrape(
        self,
        sources: Iterable[ScrapeSource],
        timeout: Optional[float] = None,
    ) -> ScrapeSummary:
        return await self.scraper.scrape(
            sources, timeout=self.timeout_seconds if timeout is None else timeout
        )

    async def scrape_paths(self, paths: Iterable[str | Path], timeout: Optional[float] = None) -> ScrapeSummary:
        """Scrape local directories, one LocalDirectorySource per path."""
        if self.extractor is None:
            raise RuntimeError("RecordService has no content extractor configured")

        paths = [Path(path) for path in paths]
        sources = [
            LocalDirectorySource(
                self.extractor, path, name="local" if len(paths) == 1 else f"local:{path.name}"
            )
            for path in paths
        ]
        return await self.scrape(sources, timeout=timeout)

    def close(self) -> None:
        self.vector_index.close()
        self.record_store.close()
        logger.info("RecordService closed")
