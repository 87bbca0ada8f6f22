"""Market data sources and the raw data model."""
