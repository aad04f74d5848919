"""
Base protocols for content extraction and type classification.
"""

from __future__ import annotations

from typing import Protocol

from casual_records.models import Record


class ContentExtractor(Protocol):
    """
    Protocol for content extractors.

    This is a Protocol (PEP 544), meaning any class that implements
    the extract() method with this signature is compatible - no
    inheritance required.
    """

    async def extract(self, raw_content: bytes | str) -> Record:
        """
        Turn raw file bytes (or text) into a classified Record.

        Args:
            raw_content: Raw bytes of a scanned image or text document, or text

        Returns:
            Record with id, type, content and metadata populated

        Raises:
            ExtractionError: If no record can be produced
        """
        ...


class TypeExtractor(Protocol):
    """Protocol for record type classifiers."""

    async def classify(self, text: str) -> str:
        """
        Classify text into one of the record types.

        Must return a value from RECORD_TYPES, using "other" whenever the
        classification is ambiguous or fails. Never raises.
        """
        ...
