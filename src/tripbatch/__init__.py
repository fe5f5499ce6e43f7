"""tripbatch - batch ingestion of trip archives."""

__version__ = "0.1.0"
