"""
어댑터 인터페이스 정의

Protocol 기반으로 정의하여 의존성 주입 및 Mock 교체 가능.
모든 구현체는 이 Protocol을 준수해야 함.
"""

from __future__ import annotations

from typing import Any, Iterable, Protocol, runtime_checkable

from adapters.models import DocumentRecord, Filter, Ordering


@runtime_checkable
class IDocumentStore(Protocol):
    """문서 저장소 인터페이스
    
    컬렉션 경로는 "/"로 구분되며, 서브컬렉션은 부모 문서 경로 아래에 위치
    (예: courses/{course_id}/students).
    
    모든 실패는 DocumentStoreError, 유일 제약 위반은 DocumentConflictError로 전달.
    """
    
    async def list(self, collection: str) -> list[DocumentRecord]:
        """컬렉션 전체 조회
        
        Args:
            collection: 컬렉션 경로
            
        Returns:
            문서 목록
        """
        ...
    
    async def list_group(self, group: str) -> list[DocumentRecord]:
        """같은 이름의 모든 서브컬렉션 조회 (collection group)
        
        Args:
            group: 컬렉션 이름 (경로의 마지막 세그먼트, 예: students)
            
        Returns:
            모든 부모 아래의 문서 목록
        """
        ...
    
    async def get(self, collection: str, doc_id: str) -> DocumentRecord | None:
        """단건 조회
        
        Returns:
            문서 또는 None (없음)
        """
        ...
    
    async def put(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """문서 저장 (덮어쓰기)
        
        Raises:
            DocumentConflictError: 유일 필드 충돌
        """
        ...
    
    async def add(self, collection: str, data: dict[str, Any]) -> str:
        """새 문서 추가 (ID 자동 생성)
        
        Returns:
            생성된 문서 ID
        """
        ...
    
    async def update(self, collection: str, doc_id: str, patch: dict[str, Any]) -> None:
        """문서 필드 부분 수정
        
        Raises:
            DocumentNotFoundError: 문서 없음
            DocumentConflictError: 유일 필드 충돌
        """
        ...
    
    async def delete(self, collection: str, doc_id: str) -> None:
        """문서 삭제 (없으면 무시)"""
        ...
    
    async def query(
        self,
        collection: str,
        filters: Iterable[Filter] = (),
        order_by: Iterable[Ordering] = (),
    ) -> list[DocumentRecord]:
        """조건 조회
        
        Args:
            collection: 컬렉션 경로
            filters: 필터 조건 (AND)
            order_by: 정렬 조건
            
        Returns:
            조건을 만족하는 문서 목록
        """
        ...
