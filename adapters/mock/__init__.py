"""
Mock 어댑터

테스트용 Mock 구현체.
"""

from adapters.mock.document_store import InMemoryDocumentStore

__all__ = [
    "InMemoryDocumentStore",
]
