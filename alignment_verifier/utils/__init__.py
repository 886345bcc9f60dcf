"""Shared infrastructure: logging setup and HTTP connection pooling."""
