"""Aggregator ingestion: query building, fetching, normalization and storage."""

from newsnexus.services.ingestion.contracts import (
    ArticleItem,
    IngestResult,
    ItemFailure,
    Provenance,
)
from newsnexus.services.ingestion.ingestion_service import IngestionService

__all__ = ["ArticleItem", "IngestResult", "IngestionService", "ItemFailure", "Provenance"]
