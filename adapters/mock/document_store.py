"""
Mock 문서 저장소

테스트용 메모리 문서 저장소.
IDocumentStore Protocol 준수.
"""

from __future__ import annotations

import asyncio
import copy
from dataclasses import dataclass
from typing import Any, Iterable
from uuid import uuid4

from adapters.models import (
    DocumentConflictError,
    DocumentNotFoundError,
    DocumentRecord,
    DocumentStoreError,
    Filter,
    Ordering,
    apply_query,
)
from core.constants import Collections


@dataclass(frozen=True)
class _Rule:
    """장애 주입 규칙"""
    
    collection: str
    field: str | None = None
    value: Any = None
    delay: float = 0.0
    operation: str | None = None
    
    def applies(self, collection: str, filters: Iterable[Filter], operation: str) -> bool:
        if collection != self.collection:
            return False
        if self.operation is not None and operation != self.operation:
            return False
        if self.field is None:
            return True
        return any(
            f.field == self.field and f.op == "==" and f.value == self.value
            for f in filters
        )


class InMemoryDocumentStore:
    """메모리 문서 저장소
    
    IDocumentStore Protocol 구현.
    유일 제약, 장애/지연 주입, 호출 기록을 제공하여 테스트에서 검증 가능.
    
    사용 예시:
    ```python
    store = InMemoryDocumentStore()
    store.seed("instructors", "i1", {"name": "Ali"})
    
    # 특정 전표 조회 실패 시나리오
    store.fail_on("vouchers", field="companyId", value="i1")
    ```
    """
    
    def __init__(
        self,
        unique_fields: dict[str, tuple[str, ...]] | None = None,
        latency: float = 0.0,
    ):
        """
        Args:
            unique_fields: 컬렉션별 유일 필드 (기본: chart_of_accounts.code)
            latency: 모든 호출에 적용할 지연 (초)
        """
        if unique_fields is None:
            unique_fields = {Collections.CHART_OF_ACCOUNTS: ("code",)}
        self.unique_fields = unique_fields
        self.latency = latency
        
        self._docs: dict[str, dict[str, Any]] = {}
        self._failures: list[_Rule] = []
        self._delays: list[_Rule] = []
        
        self.calls: list[tuple[str, str]] = []
        self.in_flight = 0
        self.max_in_flight = 0
    
    # -------------------------------------------------------------------------
    # IDocumentStore
    # -------------------------------------------------------------------------
    
    async def list(self, collection: str) -> list[DocumentRecord]:
        await self._enter("list", collection)
        try:
            return self._records_in(collection)
        finally:
            self._exit()
    
    async def list_group(self, group: str) -> list[DocumentRecord]:
        await self._enter("list_group", group)
        try:
            return [
                self._record(path)
                for path in sorted(self._docs)
                if path.split("/")[-2] == group
            ]
        finally:
            self._exit()
    
    async def get(self, collection: str, doc_id: str) -> DocumentRecord | None:
        await self._enter("get", collection)
        try:
            path = f"{collection}/{doc_id}"
            if path not in self._docs:
                return None
            return self._record(path)
        finally:
            self._exit()
    
    async def put(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        await self._enter("put", collection)
        try:
            path = f"{collection}/{doc_id}"
            self._check_unique(collection, path, data)
            self._docs[path] = copy.deepcopy(data)
        finally:
            self._exit()
    
    async def add(self, collection: str, data: dict[str, Any]) -> str:
        doc_id = uuid4().hex
        await self.put(collection, doc_id, data)
        return doc_id
    
    async def update(self, collection: str, doc_id: str, patch: dict[str, Any]) -> None:
        await self._enter("update", collection)
        try:
            path = f"{collection}/{doc_id}"
            if path not in self._docs:
                raise DocumentNotFoundError(path)
            merged = {**self._docs[path], **copy.deepcopy(patch)}
            self._check_unique(collection, path, merged)
            self._docs[path] = merged
        finally:
            self._exit()
    
    async def delete(self, collection: str, doc_id: str) -> None:
        await self._enter("delete", collection)
        try:
            self._docs.pop(f"{collection}/{doc_id}", None)
        finally:
            self._exit()
    
    async def query(
        self,
        collection: str,
        filters: Iterable[Filter] = (),
        order_by: Iterable[Ordering] = (),
    ) -> list[DocumentRecord]:
        filters = list(filters)
        await self._enter("query", collection, filters)
        try:
            return apply_query(self._records_in(collection), filters, order_by)
        finally:
            self._exit()
    
    # -------------------------------------------------------------------------
    # 테스트 헬퍼 메서드
    # -------------------------------------------------------------------------
    
    def seed(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """제약 검사 없이 문서 직접 저장"""
        self._docs[f"{collection}/{doc_id}"] = copy.deepcopy(data)
    
    def fail_on(
        self,
        collection: str,
        field: str | None = None,
        value: Any = None,
        operation: str | None = None,
    ) -> None:
        """조건에 맞는 호출을 DocumentStoreError로 실패시킴
        
        field/value를 지정하면 해당 == 필터가 포함된 query만 실패.
        operation을 지정하면 해당 작업(list, get, put, update 등)만 실패.
        """
        self._failures.append(
            _Rule(collection=collection, field=field, value=value, operation=operation)
        )
    
    def delay_on(
        self,
        collection: str,
        seconds: float,
        field: str | None = None,
        value: Any = None,
    ) -> None:
        """조건에 맞는 호출을 지연시킴 (타임아웃 시나리오)"""
        self._delays.append(
            _Rule(collection=collection, field=field, value=value, delay=seconds)
        )
    
    def clear_faults(self) -> None:
        """장애/지연 규칙 초기화"""
        self._failures.clear()
        self._delays.clear()
    
    def snapshot(self) -> dict[str, dict[str, Any]]:
        """전체 문서 사본"""
        return copy.deepcopy(self._docs)
    
    # -------------------------------------------------------------------------
    # 내부 구현
    # -------------------------------------------------------------------------
    
    async def _enter(
        self,
        operation: str,
        collection: str,
        filters: Iterable[Filter] = (),
    ) -> None:
        filters = list(filters)
        self.calls.append((operation, collection))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        
        try:
            delay = self.latency + sum(
                rule.delay for rule in self._delays if rule.applies(collection, filters, operation)
            )
            if delay > 0:
                await asyncio.sleep(delay)
            
            if any(rule.applies(collection, filters, operation) for rule in self._failures):
                raise DocumentStoreError(operation, f"injected failure on {collection}")
        except BaseException:
            self._exit()
            raise
    
    def _exit(self) -> None:
        self.in_flight -= 1
    
    def _record(self, path: str) -> DocumentRecord:
        return DocumentRecord(
            path=path,
            id=path.rsplit("/", 1)[-1],
            data=copy.deepcopy(self._docs[path]),
        )
    
    def _records_in(self, collection: str) -> list[DocumentRecord]:
        return [
            self._record(path)
            for path in sorted(self._docs)
            if path.rsplit("/", 1)[0] == collection
        ]
    
    def _check_unique(self, collection: str, path: str, data: dict[str, Any]) -> None:
        for field_name in self.unique_fields.get(collection, ()):
            value = data.get(field_name)
            if value is None:
                continue
            for other_path, other in self._docs.items():
                if (
                    other_path != path
                    and other_path.rsplit("/", 1)[0] == collection
                    and other.get(field_name) == value
                ):
                    raise DocumentConflictError(collection, field_name, value)
