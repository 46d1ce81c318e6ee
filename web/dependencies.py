"""
의존성 주입

FastAPI의 Depends를 사용한 의존성 관리.
테스트에서는 app.dependency_overrides로 get_store / get_ledger_settings 교체.
"""

from typing import AsyncGenerator

from fastapi import Depends

from adapters.db.document_store import SQLiteDocumentStore
from adapters.db.sqlite_adapter import SQLiteAdapter
from adapters.interfaces import IDocumentStore
from core.config.loader import LedgerSettings, Settings, get_settings
from core.ledger.hybrid import HybridLedgerView
from core.ledger.repository import LedgerRepository
from core.ledger.service import AccountService


def get_app_settings() -> Settings:
    """애플리케이션 설정 반환"""
    return get_settings()


def get_ledger_settings(
    settings: Settings = Depends(get_app_settings),
) -> LedgerSettings:
    """Ledger 설정 반환"""
    return settings.ledger


async def get_store(
    settings: LedgerSettings = Depends(get_ledger_settings),
) -> AsyncGenerator[IDocumentStore, None]:
    """요청 단위 문서 저장소 반환

    스키마/유일 인덱스는 앱 시작 시 생성되므로 여기서는 연결만 엶.
    """
    async with SQLiteAdapter(settings.db_path) as db:
        yield SQLiteDocumentStore(db)


def get_repository(
    store: IDocumentStore = Depends(get_store),
) -> LedgerRepository:
    """Ledger 저장소 반환"""
    return LedgerRepository(store)


def get_account_service(
    repository: LedgerRepository = Depends(get_repository),
    settings: LedgerSettings = Depends(get_ledger_settings),
) -> AccountService:
    """계정과목 관리 서비스 반환"""
    return AccountService(repository, settings)


def get_hybrid_view(
    repository: LedgerRepository = Depends(get_repository),
    settings: LedgerSettings = Depends(get_ledger_settings),
) -> HybridLedgerView:
    """하이브리드 계정과목 뷰 반환"""
    return HybridLedgerView(repository, settings)
