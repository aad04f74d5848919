"""
Content extraction and classification.

Provides the collaborator protocols consumed by scrape sources, an OCR-backed
content extractor and an LLM-backed type classifier.
"""

from casual_records.extractors.base import ContentExtractor, TypeExtractor
from casual_records.extractors.llm_classifier import FixedTypeClassifier, LLMTypeClassifier
from casual_records.extractors.ocr_extractor import (
    OCRContentExtractor,
    OCREngine,
    RapidOCREngine,
    content_id,
    sniff_image_extension,
)
from casual_records.extractors.prompts import (
    TYPE_CLASSIFICATION_SYSTEM_PROMPT,
    TYPE_CLASSIFICATION_USER_PROMPT,
)

__all__ = [
    "ContentExtractor",
    "TypeExtractor",
    "OCRContentExtractor",
    "OCREngine",
    "RapidOCREngine",
    "LLMTypeClassifier",
    "FixedTypeClassifier",
    "content_id",
    "sniff_image_extension",
    # Prompts
    "TYPE_CLASSIFICATION_SYSTEM_PROMPT",
    "TYPE_CLASSIFICATION_USER_PROMPT",
]
