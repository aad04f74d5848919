"""
Ingestion: keeping the record store and vector index in sync.
"""

from casual_records.ingestion.ingestor import RecordIngestor, validate_record
from casual_records.ingestion.models import ScrapeSummary, SourceSummary
from casual_records.ingestion.scraper import RecordScraper

__all__ = [
    "RecordIngestor",
    "RecordScraper",
    "ScrapeSummary",
    "SourceSummary",
    "validate_record",
]
