"""
LLM-based record type classification.

Asks an LLM for exactly one category name and maps the reply onto the
closed record type set. Any failure or ambiguous reply resolves to "other".
"""

import logging
from typing import Optional

from casual_llm import LLMProvider, SystemMessage, UserMessage

from casual_records.extractors.prompts import (
    TYPE_CLASSIFICATION_SYSTEM_PROMPT,
    TYPE_CLASSIFICATION_USER_PROMPT,
)
from casual_records.models import RECORD_TYPES, normalize_record_type

logger = logging.getLogger(__name__)

# Enough text for classification without blowing small context windows
MAX_CLASSIFY_CHARS = 4000


class LLMTypeClassifier:
    """Classifies record text with an LLM provider."""

    def __init__(
        self,
        llm_provider: LLMProvider,
        model_name: str,
        system_prompt: Optional[str] = None,
    ):
        """
        Initialize the classifier.

        Args:
            llm_provider: LLM provider instance
            model_name: Name of the model (for logging)
            system_prompt: Optional custom prompt (must include {categories})
        """
        self.llm_provider = llm_provider
        self.model_name = model_name
        self.system_prompt = (system_prompt or TYPE_CLASSIFICATION_SYSTEM_PROMPT).format(
            categories=", ".join(RECORD_TYPES)
        )

        logger.info(f"LLMTypeClassifier initialized: model={model_name}")

    async def classify(self, text: str) -> str:
        if not text or not text.strip():
            return "other"

        messages = [
            SystemMessage(content=self.system_prompt),
            UserMessage(content=TYPE_CLASSIFICATION_USER_PROMPT.format(text=text[:MAX_CLASSIFY_CHARS])),
        ]

        try:
            response = await self.llm_provider.chat(
                messages,
                response_format="text",
                temperature=0.0,
                max_tokens=10,
            )
        except Exception as e:
            logger.warning(f"Type classification failed ({self.model_name}), using 'other': {e}")
            return "other"

        reply = (response.content or "").strip()
        # Some models answer with a sentence; the first word is the category
        first_word = reply.split()[0] if reply else ""
        record_type = normalize_record_type(first_word)

        if record_type == "other" and first_word.lower() != "other":
            logger.warning(f"Ambiguous classification {reply[:40]!r}, using 'other'")
        else:
            logger.debug(f"Classified record as {record_type}")

        return record_type


class FixedTypeClassifier:
    """Assigns the same type to every record; used when no LLM is configured."""

    def __init__(self, record_type: str = "other"):
        self.record_type = normalize_record_type(record_type)

    async def classify(self, text: str) -> str:
        return self.record_type
