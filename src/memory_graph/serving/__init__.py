"""
Serving — FastAPI application for the ingestion pipeline.

This module exposes ingestion over HTTP so it can run as a standalone
container next to the content store.
"""
