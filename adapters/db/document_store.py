"""
SQLite 문서 저장소

documents 테이블 위에 IDocumentStore Protocol 구현.
유일 필드는 json_extract 부분 인덱스(UNIQUE)로 저장소 수준에서 보장.
"""

from __future__ import annotations

import json
import logging
import re
import sqlite3
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Iterable
from uuid import uuid4

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
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

logger = logging.getLogger(__name__)


# 인덱스 이름/부분 인덱스 조건에 들어가므로 허용 문자 제한
_SAFE_COLLECTION = re.compile(r"[A-Za-z0-9_/]+")
_SAFE_FIELD = re.compile(r"[A-Za-z0-9_]+")


class SQLiteDocumentStore:
    """SQLite 문서 저장소
    
    IDocumentStore Protocol 구현.
    
    Args:
        db: 연결된 SQLiteAdapter
        unique_fields: 컬렉션별 유일 필드 (기본: chart_of_accounts.code)
    
    사용 예시:
    ```python
    async with SQLiteAdapter(db_path) as db:
        store = SQLiteDocumentStore(db)
        await store.initialize()
        
        await store.put("chart_of_accounts", "1", {"code": "1", "name": "Assets"})
    ```
    """
    
    def __init__(
        self,
        db: SQLiteAdapter,
        unique_fields: dict[str, tuple[str, ...]] | None = None,
    ):
        if unique_fields is None:
            unique_fields = {Collections.CHART_OF_ACCOUNTS: ("code",)}
        self.db = db
        self.unique_fields = unique_fields
    
    async def initialize(self) -> None:
        """테이블 및 유일 인덱스 생성"""
        async with self._guard("initialize"):
            await init_schema(self.db)
            
            for collection, fields in self.unique_fields.items():
                for field_name in fields:
                    await self._create_unique_index(collection, field_name)
            
            await self.db.commit()
    
    async def _create_unique_index(self, collection: str, field_name: str) -> None:
        if not _SAFE_COLLECTION.fullmatch(collection) or not _SAFE_FIELD.fullmatch(field_name):
            raise ValueError(f"Unsafe unique index definition: {collection}.{field_name}")
        
        index_name = f"ux_documents_{collection.replace('/', '_')}_{field_name}"
        await self.db.execute(f"""
            CREATE UNIQUE INDEX IF NOT EXISTS {index_name}
            ON documents(collection, json_extract(data_json, '$.{field_name}'))
            WHERE collection = '{collection}'
        """)
        logger.debug(f"유일 인덱스 확인: {index_name}")
    
    # -------------------------------------------------------------------------
    # 조회
    # -------------------------------------------------------------------------
    
    async def list(self, collection: str) -> list[DocumentRecord]:
        async with self._guard("list"):
            rows = await self.db.fetchall(
                """
                SELECT path, doc_id, data_json
                FROM documents
                WHERE collection = ?
                ORDER BY path
                """,
                (collection,),
            )
        return [self._to_record(row) for row in rows]
    
    async def list_group(self, group: str) -> list[DocumentRecord]:
        async with self._guard("list_group"):
            rows = await self.db.fetchall(
                """
                SELECT path, doc_id, data_json
                FROM documents
                WHERE group_name = ?
                ORDER BY path
                """,
                (group,),
            )
        return [self._to_record(row) for row in rows]
    
    async def get(self, collection: str, doc_id: str) -> DocumentRecord | None:
        async with self._guard("get"):
            row = await self.db.fetchone(
                "SELECT path, doc_id, data_json FROM documents WHERE path = ?",
                (f"{collection}/{doc_id}",),
            )
        return self._to_record(row) if row else None
    
    async def query(
        self,
        collection: str,
        filters: Iterable[Filter] = (),
        order_by: Iterable[Ordering] = (),
    ) -> list[DocumentRecord]:
        # 필터/정렬은 메모리 구현과 동일한 규칙으로 적용
        records = await self.list(collection)
        return apply_query(records, filters, order_by)
    
    # -------------------------------------------------------------------------
    # 쓰기
    # -------------------------------------------------------------------------
    
    async def put(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        path = f"{collection}/{doc_id}"
        async with self._guard("put", collection, data):
            async with self.db.transaction() as conn:
                await conn.execute(
                    """
                    INSERT INTO documents (path, collection, group_name, doc_id, data_json)
                    VALUES (?, ?, ?, ?, ?)
                    ON CONFLICT(path) DO UPDATE SET
                        data_json = excluded.data_json,
                        updated_at = datetime('now')
                    """,
                    (
                        path,
                        collection,
                        collection.rsplit("/", 1)[-1],
                        doc_id,
                        json.dumps(data, ensure_ascii=False),
                    ),
                )
    
    async def add(self, collection: str, data: dict[str, Any]) -> str:
        doc_id = uuid4().hex
        await self.put(collection, doc_id, data)
        return doc_id
    
    async def update(self, collection: str, doc_id: str, patch: dict[str, Any]) -> None:
        path = f"{collection}/{doc_id}"
        async with self._guard("update", collection, patch):
            async with self.db.transaction() as conn:
                cursor = await conn.execute(
                    "SELECT data_json FROM documents WHERE path = ?",
                    (path,),
                )
                row = await cursor.fetchone()
                if row is None:
                    raise DocumentNotFoundError(path)
                
                merged = {**json.loads(row[0]), **patch}
                await conn.execute(
                    """
                    UPDATE documents
                    SET data_json = ?, updated_at = datetime('now')
                    WHERE path = ?
                    """,
                    (json.dumps(merged, ensure_ascii=False), path),
                )
    
    async def delete(self, collection: str, doc_id: str) -> None:
        async with self._guard("delete"):
            async with self.db.transaction() as conn:
                await conn.execute(
                    "DELETE FROM documents WHERE path = ?",
                    (f"{collection}/{doc_id}",),
                )
    
    # -------------------------------------------------------------------------
    # 내부 구현
    # -------------------------------------------------------------------------
    
    @asynccontextmanager
    async def _guard(
        self,
        operation: str,
        collection: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> AsyncIterator[None]:
        """드라이버 예외를 저장소 예외로 변환"""
        try:
            yield
        except DocumentStoreError:
            raise
        except sqlite3.IntegrityError as e:
            fields = self.unique_fields.get(collection or "", ())
            field_name = fields[0] if fields else "?"
            value = (data or {}).get(field_name)
            logger.warning(
                "유일 제약 위반",
                extra={"collection": collection, "field": field_name, "value": value},
            )
            raise DocumentConflictError(collection or "?", field_name, value) from e
        except (sqlite3.Error, RuntimeError, OSError) as e:
            logger.error(
                f"문서 저장소 오류: {operation}",
                extra={"error": str(e)},
            )
            raise DocumentStoreError(operation, str(e)) from e
    
    @staticmethod
    def _to_record(row: tuple[Any, ...]) -> DocumentRecord:
        return DocumentRecord(path=row[0], id=row[1], data=json.loads(row[2]))
