"""
Web 라우트 테스트 fixture

get_store / get_ledger_settings를 메모리 저장소와 테스트 설정으로 교체.
TestClient를 컨텍스트 매니저로 쓰지 않으므로 lifespan(SQLite 초기화)은 실행되지 않음.
"""

import pytest
from fastapi.testclient import TestClient

from adapters.mock.document_store import InMemoryDocumentStore
from core.config.loader import LedgerSettings
from web.app import app
from web.dependencies import get_ledger_settings, get_store


@pytest.fixture
def make_client(ledger_settings: LedgerSettings):
    """저장소를 지정해 TestClient 생성"""
    def factory(store: InMemoryDocumentStore) -> TestClient:
        app.dependency_overrides[get_store] = lambda: store
        app.dependency_overrides[get_ledger_settings] = lambda: ledger_settings
        return TestClient(app)
    
    yield factory
    app.dependency_overrides.clear()


@pytest.fixture
def client(make_client, institute_store: InMemoryDocumentStore) -> TestClient:
    """기본 계정과목표 + 엔티티 데이터 기반 클라이언트"""
    return make_client(institute_store)
