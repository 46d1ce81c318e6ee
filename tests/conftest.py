"""
pytest 공통 fixture 정의

메모리 문서 저장소, 기본 계정과목표, 학생/강사/거래처/비용 지급처 샘플 데이터
"""

import tempfile
from pathlib import Path

import pytest

from adapters.mock.document_store import InMemoryDocumentStore
from core.config.loader import LedgerSettings, Settings
from core.constants import Collections
from core.ledger.repository import LedgerRepository
from tests.helpers import seed_default_chart


@pytest.fixture(autouse=True)
def reset_settings():
    """Settings 싱글턴 초기화"""
    Settings.reset()
    yield
    Settings.reset()


@pytest.fixture
def temp_dir() -> Path:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_settings_file(temp_dir: Path) -> Path:
    """테스트용 settings.yaml 파일 생성"""
    settings_content = """# 테스트용 settings.yaml
ledger:
  db_path: data/test_ledger.db
  log_level: debug
  max_concurrency: 4
  fetch_timeout_sec: 2.5
  commit_retries: 5
  name_match_fallback: false
  sibling_order: numeric
  roll_up: false

web:
  host: 0.0.0.0
  port: 9000

sources:
  - name: students
    kind: student
    collection_group: true
    anchor_code: "102"
    code_prefix: S
  - name: suppliers
    kind: client
    collection: suppliers
    anchor_code: "201"
    code_prefix: P
    convention: ledger
    entity_types: [supplier]
"""
    settings_path = temp_dir / "settings.yaml"
    settings_path.write_text(settings_content, encoding="utf-8")
    return settings_path


@pytest.fixture
def ledger_settings() -> LedgerSettings:
    """테스트용 Ledger 설정 (짧은 타임아웃)"""
    return LedgerSettings(fetch_timeout_sec=0.2, max_concurrency=4)


@pytest.fixture
def store() -> InMemoryDocumentStore:
    """빈 메모리 문서 저장소"""
    return InMemoryDocumentStore()


@pytest.fixture
def chart_store(store: InMemoryDocumentStore) -> InMemoryDocumentStore:
    """기본 계정과목표가 저장된 메모리 문서 저장소"""
    seed_default_chart(store)
    return store


@pytest.fixture
def institute_store(chart_store: InMemoryDocumentStore) -> InMemoryDocumentStore:
    """기본 계정과목표 + 과정/학생/강사/거래처/비용 지급처/전표

    - 학생 s1(Sara), s2(Omar): 과정 c1 (수강료 5000)
    - 학생 s3(Lina): 과정 c2 (price 1500)
    - 강사 i1(Ali): 기초 잔액 1000
    - 거래처 k1(Acme)
    - 비용 지급처 e1(Rent): 기초 잔액 0
    """
    store = chart_store

    store.seed("courses", "c1", {"title": "Python", "feePerStudent": 5000})
    store.seed("courses", "c2", {"title": "Excel", "price": 1500})
    store.seed("courses/c1/students", "s1", {"name": "Sara"})
    store.seed("courses/c1/students", "s2", {"studentName": "Omar"})
    store.seed("courses/c2/students", "s3", {"name": "Lina"})
    store.seed("instructors", "i1", {"name": "Ali", "openingBalance": 1000})
    store.seed("clients", "k1", {"name": "Acme"})
    store.seed("expenses", "e1", {"name": "Rent", "amount": 0, "category": "office"})

    vouchers = [
        # 학생 s1: 3000 입금
        ("v1", {"type": "receipt", "amount": 2000, "companyId": "s1", "entityType": "student"}),
        ("v2", {"type": "receipt", "amount": 1000, "companyId": "s1", "entityType": "student"}),
        # 학생 s2: 5000 완납
        ("v3", {"type": "receipt", "amount": 5000, "companyId": "s2", "entityType": "student"}),
        # 강사 i1: 400 지급
        ("v4", {"type": "payment", "amount": 400, "companyId": "i1", "entityType": "instructor"}),
        # 거래처 k1: 700 입금
        ("v5", {"type": "receipt", "amount": 700, "companyId": "k1", "entityType": "client"}),
        # 비용 e1: 1200 지급, 200 환급
        ("v6", {"type": "payment", "amount": 1200, "companyId": "e1", "entityType": "expense"}),
        ("v7", {"type": "receipt", "amount": 200, "companyId": "e1", "entityType": "expense"}),
    ]
    for voucher_id, data in vouchers:
        store.seed(Collections.VOUCHERS, voucher_id, data)

    return store


@pytest.fixture
def repository(store: InMemoryDocumentStore) -> LedgerRepository:
    """메모리 저장소 기반 Ledger 저장소"""
    return LedgerRepository(store)
