"""Bulk S3 Cache-Control / Content-Type rewrite pipeline."""

__version__ = "0.1.0"
