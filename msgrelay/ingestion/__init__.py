"""
Ingestion module.
"""

from msgrelay.ingestion.service import IngestionService, extract_message

__all__ = ["IngestionService", "extract_message"]
