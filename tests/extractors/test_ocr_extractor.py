"""Tests for the OCR content extractor."""

import base64
import sys
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest

from casual_records.errors import ExtractionError
from casual_records.extractors.ocr_extractor import (
    OCRContentExtractor,
    RapidOCREngine,
    content_id,
    sniff_image_extension,
)

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 400


@pytest.fixture
def classifier():
    """Type classifier that always answers 'receipt'."""
    mock = Mock()
    mock.classify = AsyncMock(return_value="receipt")
    return mock


@pytest.fixture
def ocr_engine():
    """OCR engine returning fixed text."""
    engine = Mock()
    engine.image_to_text = Mock(return_value="Dental invoice total 80.00")
    return engine


@pytest.fixture
def extractor(classifier, ocr_engine):
    return OCRContentExtractor(classifier, ocr_engine=ocr_engine)


@pytest.mark.parametrize(
    "data,expected",
    [
        (PNG_BYTES, ".png"),
        (b"\xff\xd8\xff\xe0rest", ".jpg"),
        (b"RIFF\x00\x00\x00\x00WEBPVP8 ", ".webp"),
        (b"II*\x00rest", ".tif"),
        (b"MM\x00*rest", ".tif"),
        (b"plain text", None),
        (b"", None),
    ],
)
def test_sniff_image_extension(data, expected):
    assert sniff_image_extension(data) == expected


def test_content_id_is_stable():
    """Same bytes give the same id; different bytes differ."""
    assert content_id(b"abc") == content_id(b"abc")
    assert content_id(b"abc") != content_id(b"abd")
    assert content_id(b"abc").startswith("doc-")
    assert len(content_id(b"abc")) == len("doc-") + 16


@pytest.mark.asyncio
async def test_plain_text(extractor, classifier, ocr_engine):
    """UTF-8 text passes through without OCR."""
    raw = b"Grocery receipt: bread, eggs. Total 12.50"

    record = await extractor.extract(raw)

    assert record.id == content_id(raw)
    assert record.type == "receipt"
    assert record.content == raw.decode("utf-8")
    assert record.metadata["input_kind"] == "text"
    assert record.metadata["ocr_used"] is False
    ocr_engine.image_to_text.assert_not_called()
    classifier.classify.assert_awaited_once_with(raw.decode("utf-8"))


@pytest.mark.asyncio
async def test_str_input(extractor):
    """Text can be passed as a str."""
    record = await extractor.extract("Passport renewal form")

    assert record.content == "Passport renewal form"
    assert record.id == content_id("Passport renewal form".encode("utf-8"))


@pytest.mark.asyncio
async def test_image_bytes_use_ocr(extractor, ocr_engine):
    """Image magic bytes route through the OCR engine."""
    record = await extractor.extract(PNG_BYTES)

    assert record.content == "Dental invoice total 80.00"
    assert record.metadata["input_kind"] == "image"
    assert record.metadata["ocr_used"] is True
    assert record.metadata["sniffed_ext"] == ".png"

    image_path = Path(ocr_engine.image_to_text.call_args.args[0])
    assert image_path.suffix == ".png"
    # the temporary image is cleaned up
    assert not image_path.exists()


@pytest.mark.asyncio
async def test_data_url_uses_ocr(extractor, ocr_engine):
    """data:image/...;base64 payloads are decoded and OCR'd."""
    data_url = "data:image/jpeg;base64," + base64.b64encode(PNG_BYTES).decode("ascii")

    record = await extractor.extract(data_url)

    assert record.metadata["input_kind"] == "data_url"
    assert record.metadata["mime"] == "image/jpeg"
    assert Path(ocr_engine.image_to_text.call_args.args[0]).suffix == ".jpg"


@pytest.mark.asyncio
async def test_large_base64_image_uses_ocr(extractor):
    """Long base64 blobs that decode to an image are OCR'd."""
    blob = base64.b64encode(PNG_BYTES)
    assert len(blob) >= 500

    record = await extractor.extract(blob)

    assert record.metadata["input_kind"] == "base64_blob"
    assert record.metadata["sniffed_ext"] == ".png"


@pytest.mark.asyncio
async def test_short_base64_is_text(extractor, ocr_engine):
    """Short base64-looking strings are treated as text."""
    record = await extractor.extract(b"SGVsbG8gV29ybGQ=")

    assert record.metadata["input_kind"] == "text"
    ocr_engine.image_to_text.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", [b"", b"   \n\t", ""])
async def test_empty_input_raises(extractor, raw):
    with pytest.raises(ExtractionError):
        await extractor.extract(raw)


@pytest.mark.asyncio
async def test_ocr_without_text_raises(extractor, ocr_engine):
    """An image with no readable text cannot become a record."""
    ocr_engine.image_to_text.return_value = ""

    with pytest.raises(ExtractionError):
        await extractor.extract(PNG_BYTES)


@pytest.mark.asyncio
async def test_ocr_failure_raises_extraction_error(extractor, ocr_engine):
    ocr_engine.image_to_text.side_effect = RuntimeError("model crashed")

    with pytest.raises(ExtractionError, match="OCR failed"):
        await extractor.extract(PNG_BYTES)


@pytest.mark.asyncio
async def test_unknown_binary_raises(extractor):
    """Binary content that is neither image nor UTF-8 is rejected."""
    with pytest.raises(ExtractionError):
        await extractor.extract(b"\x00\xff\xfe\x80\x81")


@pytest.mark.asyncio
async def test_classifier_output_normalized(classifier, ocr_engine):
    """Classifier answers outside the type set become 'other'."""
    classifier.classify = AsyncMock(return_value="Banana")
    extractor = OCRContentExtractor(classifier, ocr_engine=ocr_engine)

    record = await extractor.extract(b"some text")

    assert record.type == "other"


def test_rapidocr_missing_raises_helpful_import_error(monkeypatch):
    """Without the ocr extra, creating the engine explains how to install it."""
    monkeypatch.setitem(sys.modules, "rapidocr_onnxruntime", None)

    with pytest.raises(ImportError, match="casual-records\\[ocr\\]"):
        RapidOCREngine()
