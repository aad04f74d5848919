"""
OCR-backed content extraction.

Turns raw document bytes into a classified Record. Images (PNG, JPEG, WEBP,
TIFF, data URLs, large base64 blobs) are run through OCR; anything else is
decoded as UTF-8 text.
"""

import asyncio
import base64
import binascii
import hashlib
import logging
import re
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Tuple

from casual_records.errors import ExtractionError
from casual_records.extractors.base import TypeExtractor
from casual_records.models import Record, normalize_record_type

logger = logging.getLogger(__name__)

# Shorter base64 strings are far more likely to be text than an image
MIN_BASE64_IMAGE_LENGTH = 500

_BASE64_BLOB = re.compile(r"^[A-Za-z0-9+/=]+$")
_DATA_URL = re.compile(r"^data:(image/[\w.+-]+);base64,(.*)$", re.DOTALL)

_MIME_EXTENSIONS = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/webp": ".webp",
    "image/tiff": ".tif",
}


class OCREngine(Protocol):
    """Anything that can read the text out of an image file."""

    def image_to_text(self, image_path: str) -> str: ...


class RapidOCREngine:
    """OCR engine backed by RapidOCR (ONNX Runtime)."""

    def __init__(self):
        try:
            from rapidocr_onnxruntime import RapidOCR
        except ImportError as e:
            raise ImportError(
                "rapidocr-onnxruntime is required for image OCR. "
                "Install with: pip install casual-records[ocr]"
            ) from e

        self._engine = RapidOCR()
        logger.info("RapidOCR engine loaded")

    def image_to_text(self, image_path: str) -> str:
        # RapidOCR returns (result, elapsed); result is a list of [box, text, score]
        result, _ = self._engine(image_path)
        if not result:
            return ""
        lines = [str(item[1]) for item in result if item and len(item) >= 2 and item[1]]
        return "\n".join(lines).strip()


def sniff_image_extension(data: bytes) -> Optional[str]:
    """Return a file extension for known image magic bytes, else None."""
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return ".png"
    if data.startswith(b"\xff\xd8\xff"):
        return ".jpg"
    if len(data) >= 12 and data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return ".webp"
    if data.startswith(b"II*\x00") or data.startswith(b"MM\x00*"):
        return ".tif"
    return None


def content_id(raw: bytes) -> str:
    """Content-addressed record id, so re-scraping the same file upserts."""
    return f"doc-{hashlib.sha256(raw).hexdigest()[:16]}"


class OCRContentExtractor:
    """
    Extracts records from scanned images or plain text.

    Classification is delegated to a TypeExtractor; unrecognized results
    fall back to "other".
    """

    def __init__(self, type_extractor: TypeExtractor, ocr_engine: Optional[OCREngine] = None):
        """
        Initialize the extractor.

        Args:
            type_extractor: Classifier for the extracted text
            ocr_engine: OCR engine (default: RapidOCREngine, created on first image)
        """
        self.type_extractor = type_extractor
        self._ocr_engine = ocr_engine

    @property
    def ocr_engine(self) -> OCREngine:
        if self._ocr_engine is None:
            self._ocr_engine = RapidOCREngine()
        return self._ocr_engine

    async def extract(self, raw_content: bytes | str) -> Record:
        raw = raw_content.encode("utf-8") if isinstance(raw_content, str) else raw_content
        if not raw.strip():
            raise ExtractionError("raw content is empty")

        text, metadata = await self._to_text(raw)
        if not text.strip():
            raise ExtractionError(f"no text could be extracted ({metadata.get('input_kind')})")

        record_type = normalize_record_type(await self.type_extractor.classify(text))
        now = datetime.now()

        record = Record(
            id=content_id(raw),
            type=record_type,
            content=text,
            metadata=metadata,
            created_at=now,
            updated_at=now,
        )
        logger.debug(f"Extracted record {record.id} ({record_type}, {len(text)} chars)")
        return record

    async def _to_text(self, raw: bytes) -> Tuple[str, Dict[str, Any]]:
        metadata: Dict[str, Any] = {"source": "ocr"}

        extension = sniff_image_extension(raw)
        if extension:
            metadata.update(input_kind="image", ocr_used=True, sniffed_ext=extension)
            return await self._ocr(raw, extension), metadata

        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ExtractionError(f"unsupported binary content: {e}") from e

        stripped = text.strip()

        match = _DATA_URL.match(stripped)
        if match:
            mime, payload = match.groups()
            metadata.update(input_kind="data_url", mime=mime, ocr_used=True)
            try:
                image = base64.b64decode(payload, validate=False)
            except (binascii.Error, ValueError) as e:
                raise ExtractionError(f"failed to decode data URL base64: {e}") from e
            return await self._ocr(image, _MIME_EXTENSIONS.get(mime.lower(), ".png")), metadata

        blob = "".join(stripped.split())
        if len(blob) >= MIN_BASE64_IMAGE_LENGTH and len(blob) % 4 == 0 and _BASE64_BLOB.match(blob):
            try:
                image = base64.b64decode(blob, validate=True)
            except (binascii.Error, ValueError):
                image = b""
            extension = sniff_image_extension(image)
            if extension:
                metadata.update(input_kind="base64_blob", ocr_used=True, sniffed_ext=extension)
                return await self._ocr(image, extension), metadata

        metadata.update(input_kind="text", ocr_used=False)
        return text, metadata

    async def _ocr(self, image: bytes, extension: str) -> str:
        engine = self.ocr_engine
        return await asyncio.to_thread(_ocr_bytes, engine, image, extension)


def _ocr_bytes(engine: OCREngine, image: bytes, extension: str) -> str:
    # OCR engines want a path; the temp directory is removed even on failure
    with tempfile.TemporaryDirectory(prefix="casual-records-ocr-") as tmp_dir:
        image_path = Path(tmp_dir) / f"image{extension}"
        image_path.write_bytes(image)
        try:
            return engine.image_to_text(str(image_path))
        except Exception as e:
            raise ExtractionError(f"OCR failed: {e}") from e
