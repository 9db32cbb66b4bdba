"""NewsNexus API: news ingestion, review and reporting back-end."""

__version__ = "0.1.0"
