"""
FastAPI memory service.

Provides the HTTP surface over the document store and search engine:
- /v3/documents - Add, batch add, list, get, update and delete documents
- /v3/search, /v4/search - Semantic similarity search
- /v4/memories, /v4/profile - Memory-oriented aliases
- /v3/settings - Single-record settings store
- /health - Service health check
"""

from memstore.api.app import create_app

__all__ = ["create_app"]
