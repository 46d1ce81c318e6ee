"""
FastAPI 애플리케이션

라우터 등록 및 앱 설정.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from adapters.db.document_store import SQLiteDocumentStore
from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import get_settings
from core.logging import setup_logging
from web.routes import accounts, balances, health
from web.routes.health import API_VERSION

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """앱 생명주기 관리"""
    settings = get_settings()
    
    # 로깅 설정 (콘솔 + 파일)
    setup_logging("web", console_level=logging.getLevelName(settings.ledger.log_level))
    
    # 시작 시 - DB 스키마 및 유일 인덱스 자동 초기화
    async with SQLiteAdapter(settings.db_path) as db:
        await SQLiteDocumentStore(db).initialize()
    
    logger.info(
        "Web: Ledger 저장소 준비 완료",
        extra={"db_path": str(settings.db_path), "sources": len(settings.ledger.sources)},
    )
    
    yield


app = FastAPI(
    title="COA Ledger API",
    description="계정과목표 및 엔티티 잔액 API",
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS 설정 (개발용)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# =========================================================================
# API 라우터 등록
# =========================================================================

app.include_router(health.router)
app.include_router(accounts.router)
app.include_router(balances.router)
