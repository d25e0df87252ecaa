"""agent-memory-graph — knowledge ingestion into a content/vector store."""

__version__ = "0.1.0"
