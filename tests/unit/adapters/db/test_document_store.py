"""
SQLite 문서 저장소 테스트

SQLiteDocumentStore CRUD, 컬렉션 그룹 조회, 유일 인덱스 검증.
"""

from pathlib import Path

import pytest
import pytest_asyncio

from adapters.db.document_store import SQLiteDocumentStore
from adapters.db.sqlite_adapter import SQLiteAdapter
from adapters.models import (
    DocumentConflictError,
    DocumentNotFoundError,
    DocumentStoreError,
    Filter,
    Ordering,
)
from core.constants import Collections


class TestSQLiteDocumentStore:
    """SQLiteDocumentStore 테스트"""
    
    @pytest_asyncio.fixture
    async def store(self, tmp_path: Path) -> SQLiteDocumentStore:
        """초기화된 저장소 픽스처"""
        adapter = SQLiteAdapter(tmp_path / "documents.db")
        await adapter.connect()
        store = SQLiteDocumentStore(adapter)
        await store.initialize()
        yield store
        await adapter.close()
    
    @pytest.mark.asyncio
    async def test_put_and_get(self, store: SQLiteDocumentStore) -> None:
        """저장 후 조회 (한글/아랍어 보존)"""
        await store.put("instructors", "i1", {"name": "Ali", "nameAr": "علي"})
        
        record = await store.get("instructors", "i1")
        
        assert record is not None
        assert record.id == "i1"
        assert record.path == "instructors/i1"
        assert record.data == {"name": "Ali", "nameAr": "علي"}
    
    @pytest.mark.asyncio
    async def test_get_missing(self, store: SQLiteDocumentStore) -> None:
        """없는 문서는 None"""
        assert await store.get("instructors", "nope") is None
    
    @pytest.mark.asyncio
    async def test_put_overwrites(self, store: SQLiteDocumentStore) -> None:
        """같은 경로는 덮어쓰기"""
        await store.put("clients", "k1", {"name": "Acme"})
        await store.put("clients", "k1", {"name": "Acme Ltd"})
        
        records = await store.list("clients")
        
        assert len(records) == 1
        assert records[0].data["name"] == "Acme Ltd"
    
    @pytest.mark.asyncio
    async def test_add_generates_id(self, store: SQLiteDocumentStore) -> None:
        """add는 ID 생성"""
        doc_id = await store.add(Collections.VOUCHERS, {"type": "receipt", "amount": 10})
        
        record = await store.get(Collections.VOUCHERS, doc_id)
        
        assert record is not None
        assert record.data["amount"] == 10
    
    @pytest.mark.asyncio
    async def test_list_group(self, store: SQLiteDocumentStore) -> None:
        """모든 과정의 students 서브컬렉션 조회"""
        await store.put("courses/c1/students", "s1", {"name": "Sara"})
        await store.put("courses/c2/students", "s3", {"name": "Lina"})
        await store.put("courses", "c1", {"title": "Python"})
        
        records = await store.list_group("students")
        
        assert [r.id for r in records] == ["s1", "s3"]
        assert records[1].parent_id == "c2"
    
    @pytest.mark.asyncio
    async def test_list_excludes_subcollections(self, store: SQLiteDocumentStore) -> None:
        """list는 해당 컬렉션 문서만"""
        await store.put("courses", "c1", {"title": "Python"})
        await store.put("courses/c1/students", "s1", {"name": "Sara"})
        
        records = await store.list("courses")
        
        assert [r.id for r in records] == ["c1"]
    
    @pytest.mark.asyncio
    async def test_query(self, store: SQLiteDocumentStore) -> None:
        """필터/정렬 조회"""
        await store.put(Collections.VOUCHERS, "v1", {"companyId": "s1", "amount": 300})
        await store.put(Collections.VOUCHERS, "v2", {"companyId": "s2", "amount": 100})
        await store.put(Collections.VOUCHERS, "v3", {"companyId": "s1", "amount": 200})
        
        records = await store.query(
            Collections.VOUCHERS,
            [Filter("companyId", "==", "s1")],
            [Ordering("amount")],
        )
        
        assert [r.id for r in records] == ["v3", "v1"]
    
    @pytest.mark.asyncio
    async def test_update_merges(self, store: SQLiteDocumentStore) -> None:
        """부분 수정은 병합"""
        await store.put(Collections.CHART_OF_ACCOUNTS, "1", {"code": "1", "name": "Assets", "isLeaf": True})
        
        await store.update(Collections.CHART_OF_ACCOUNTS, "1", {"isLeaf": False})
        
        record = await store.get(Collections.CHART_OF_ACCOUNTS, "1")
        assert record.data == {"code": "1", "name": "Assets", "isLeaf": False}
    
    @pytest.mark.asyncio
    async def test_update_missing(self, store: SQLiteDocumentStore) -> None:
        """없는 문서 수정"""
        with pytest.raises(DocumentNotFoundError):
            await store.update(Collections.CHART_OF_ACCOUNTS, "nope", {"name": "X"})
    
    @pytest.mark.asyncio
    async def test_delete(self, store: SQLiteDocumentStore) -> None:
        """삭제 (없는 문서는 무시)"""
        await store.put("clients", "k1", {"name": "Acme"})
        
        await store.delete("clients", "k1")
        await store.delete("clients", "k1")
        
        assert await store.list("clients") == []
    
    @pytest.mark.asyncio
    async def test_unique_code(self, store: SQLiteDocumentStore) -> None:
        """계정 코드 유일 인덱스 → DocumentConflictError"""
        await store.put(Collections.CHART_OF_ACCOUNTS, "a", {"code": "101"})
        
        with pytest.raises(DocumentConflictError) as exc_info:
            await store.put(Collections.CHART_OF_ACCOUNTS, "b", {"code": "101"})
        
        assert exc_info.value.field_name == "code"
        assert exc_info.value.value == "101"
        assert len(await store.list(Collections.CHART_OF_ACCOUNTS)) == 1
    
    @pytest.mark.asyncio
    async def test_unique_only_within_collection(self, store: SQLiteDocumentStore) -> None:
        """다른 컬렉션은 같은 code 허용"""
        await store.put(Collections.CHART_OF_ACCOUNTS, "a", {"code": "101"})
        await store.put(Collections.VOUCHERS, "v1", {"code": "101"})
        
        assert len(await store.list(Collections.VOUCHERS)) == 1
    
    @pytest.mark.asyncio
    async def test_initialize_idempotent(self, store: SQLiteDocumentStore) -> None:
        """initialize 재실행 가능"""
        await store.initialize()
        
        row = await store.db.fetchone(
            "SELECT COUNT(*) FROM sqlite_master WHERE type = 'index' AND name LIKE 'ux_documents_%'"
        )
        assert row[0] == 1
    
    @pytest.mark.asyncio
    async def test_unsafe_unique_field(self, tmp_path: Path) -> None:
        """인덱스 정의에 허용되지 않는 문자"""
        async with SQLiteAdapter(tmp_path / "unsafe.db") as adapter:
            store = SQLiteDocumentStore(adapter, unique_fields={"accounts": ("code'; --",)})
            
            with pytest.raises(ValueError):
                await store.initialize()
    
    @pytest.mark.asyncio
    async def test_disconnected_adapter(self, tmp_path: Path) -> None:
        """연결되지 않은 어댑터 → DocumentStoreError"""
        store = SQLiteDocumentStore(SQLiteAdapter(tmp_path / "closed.db"))
        
        with pytest.raises(DocumentStoreError):
            await store.list("clients")
