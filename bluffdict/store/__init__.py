"""
Document store package for Bluffdict

Exposes the atomic store capability and its in-memory implementation.
"""

from .document_store import (
    DocumentStore,
    InMemoryDocumentStore,
    Transaction,
    TransactionConflictError,
    server_timestamp,
)

__all__ = [
    'DocumentStore',
    'InMemoryDocumentStore',
    'Transaction',
    'TransactionConflictError',
    'server_timestamp',
]
