"""
Document storage backends and record serialization
"""

from .base import DocumentStore, InMemoryDocumentStore
from .file_store import JsonFileDocumentStore
from .http_store import HttpDocumentStore, HttpStoreConfig
from .serialization import (
    document_from_dict,
    document_to_dict,
    dumps_documents,
    loads_documents,
)

__all__ = [
    'DocumentStore',
    'InMemoryDocumentStore',
    'JsonFileDocumentStore',
    'HttpDocumentStore',
    'HttpStoreConfig',
    'document_from_dict',
    'document_to_dict',
    'dumps_documents',
    'loads_documents',
]
