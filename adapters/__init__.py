"""
어댑터 레이어

외부 문서 저장소와의 연동을 담당.
Protocol 기반 인터페이스로 Mock 교체 가능.
"""

from adapters.interfaces import IDocumentStore
from adapters.models import (
    DocumentConflictError,
    DocumentNotFoundError,
    DocumentRecord,
    DocumentStoreError,
    Filter,
    Ordering,
)

__all__ = [
    # Interfaces
    "IDocumentStore",
    # Models
    "DocumentRecord",
    "Filter",
    "Ordering",
    # Errors
    "DocumentStoreError",
    "DocumentConflictError",
    "DocumentNotFoundError",
]
