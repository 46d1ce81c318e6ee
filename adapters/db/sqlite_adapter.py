"""
SQLite 어댑터

문서 저장소용 aiosqlite 연결 (WAL 모드).
Web 프로세스와 점검 스크립트가 같은 DB 파일을 동시에 열 수 있음.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

import aiosqlite

from core.constants import Paths

logger = logging.getLogger(__name__)

# 다른 프로세스가 쓰기 잠금을 잡고 있을 때 대기 시간 (ms)
BUSY_TIMEOUT_MS = 30000


def get_db_path(db_path: Path | str | None = None) -> Path:
    """DB 경로 반환 (None이면 기본 Ledger DB)"""
    if db_path is None:
        return Paths.LEDGER_DB
    return Path(db_path)


class SQLiteAdapter:
    """SQLite 연결 관리

    Args:
        db_path: DB 파일 경로 (상위 디렉토리는 연결 시 생성)

    사용 예시:
    ```python
    async with SQLiteAdapter(db_path) as db:
        async with db.transaction() as conn:
            await conn.execute("INSERT INTO documents ...")
    ```
    """

    def __init__(self, db_path: Path | str):
        self.db_path = Path(db_path)
        self._conn: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """연결 생성 (이미 연결되어 있으면 무시)"""
        if self._conn is not None:
            return

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = await aiosqlite.connect(str(self.db_path))
        await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute(f"PRAGMA busy_timeout={BUSY_TIMEOUT_MS}")
        self._conn = conn

        logger.info("SQLite 연결 생성", extra={"db_path": str(self.db_path)})

    async def close(self) -> None:
        """연결 종료"""
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
            logger.info("SQLite 연결 종료", extra={"db_path": str(self.db_path)})

    def _connection(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError(f"Not connected to database: {self.db_path}")
        return self._conn

    async def execute(
        self,
        sql: str,
        parameters: tuple[Any, ...] = (),
    ) -> aiosqlite.Cursor:
        """SQL 실행 (커밋은 호출자가 수행)"""
        return await self._connection().execute(sql, parameters)

    async def fetchone(
        self,
        sql: str,
        parameters: tuple[Any, ...] = (),
    ) -> tuple[Any, ...] | None:
        cursor = await self.execute(sql, parameters)
        return await cursor.fetchone()

    async def fetchall(
        self,
        sql: str,
        parameters: tuple[Any, ...] = (),
    ) -> list[tuple[Any, ...]]:
        cursor = await self.execute(sql, parameters)
        return list(await cursor.fetchall())

    async def commit(self) -> None:
        await self._connection().commit()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """쓰기 트랜잭션

        블록이 끝나면 커밋, 예외(유일 제약 위반 포함) 시 롤백 후 재발생.
        """
        conn = self._connection()
        try:
            yield conn
            await conn.commit()
        except Exception:
            await conn.rollback()
            raise

    async def __aenter__(self) -> "SQLiteAdapter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


async def init_schema(adapter: SQLiteAdapter) -> None:
    """documents 테이블 생성 (멱등)

    컬렉션/서브컬렉션 문서를 경로(path) 단위로 한 테이블에 저장.
    - collection: 문서가 속한 컬렉션 경로 (courses/c1/students)
    - group_name: 컬렉션 그룹 조회용 마지막 세그먼트 (students)
    """
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS documents (
            path             TEXT PRIMARY KEY,
            collection       TEXT NOT NULL,
            group_name       TEXT NOT NULL,
            doc_id           TEXT NOT NULL,
            data_json        TEXT NOT NULL,
            created_at       TEXT NOT NULL DEFAULT (datetime('now')),
            updated_at       TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)
    await adapter.execute(
        "CREATE INDEX IF NOT EXISTS ix_documents_collection ON documents(collection)"
    )
    await adapter.execute(
        "CREATE INDEX IF NOT EXISTS ix_documents_group ON documents(group_name)"
    )
    await adapter.commit()

    logger.debug("documents 스키마 확인")
