"""
Discovery: ranking and filtering records for a free-text query.
"""

from casual_records.discovery.discovery import (
    RecordDiscovery,
    keyword_score,
    matches_filters,
)

__all__ = ["RecordDiscovery", "keyword_score", "matches_filters"]
