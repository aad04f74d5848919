"""
Configuration for casual-records, loaded from the environment.

Values come from ``CASUAL_RECORDS_*`` environment variables, optionally read
from a ``.env`` file first.
"""

import os
from typing import Literal, Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field

ENV_PREFIX = "CASUAL_RECORDS_"

StorageBackend = Literal["file", "sqlite", "memory"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


class RecordsConfig(BaseModel):
    """Runtime settings for the record service and the CLI."""

    storage_backend: StorageBackend = Field("file", description="Record store backend")
    storage_path: str = Field("./data/records", description="Directory for the file backend")
    database_url: str = Field(
        "sqlite:///./data/records.db", description="SQLAlchemy URL for the sqlite backend"
    )
    source_path: str = Field("./data/inbox", description="Default directory to scrape")
    embedding_dimension: int = Field(100, gt=0, description="Hashed embedding dimension")
    timeout_seconds: float = Field(180, gt=0, description="Wall-clock limit for a scrape run")
    search_limit: int = Field(10, description="Default search limit (<= 0 means unlimited)")
    log_level: LogLevel = Field("INFO", description="Logging level")
    ollama_endpoint: Optional[str] = Field(None, description="Ollama base URL for the type classifier")
    llm_model: str = Field("llama3.2", description="Model used by the type classifier")

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "RecordsConfig":
        """
        Build the configuration from environment variables.

        Unset variables keep their defaults. Invalid values raise pydantic's
        ValidationError.

        Args:
            dotenv_path: Optional .env file to load first (default: nearest .env from the working directory)
        """
        load_dotenv(dotenv_path or find_dotenv(usecwd=True))

        values = {}
        for name in cls.model_fields:
            if name == "ollama_endpoint":
                raw = os.getenv("OLLAMA_ENDPOINT")
            else:
                raw = os.getenv(f"{ENV_PREFIX}{name.upper()}")
            if raw is not None and raw != "":
                values[name] = raw

        if "log_level" in values:
            values["log_level"] = values["log_level"].upper()
        if "storage_backend" in values:
            values["storage_backend"] = values["storage_backend"].lower()

        return cls.model_validate(values)
