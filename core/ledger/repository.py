"""
Ledger 저장소 경계

IDocumentStore 위에서 계정과목/엔티티/전표를 도메인 타입으로 읽고 쓰는 비동기 어댑터.
저장소 예외는 Ledger 예외로 변환:
- 유일 제약 위반 → ConflictOnCommit
- 그 외 저장소 실패 → BackingStoreUnavailable
"""

import logging
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import AsyncIterator, Iterable

from adapters.interfaces import IDocumentStore
from adapters.models import (
    DocumentConflictError,
    DocumentNotFoundError,
    DocumentRecord,
    DocumentStoreError,
    Filter,
)
from core.constants import Collections
from core.ledger.codes import parse_root_code
from core.ledger.errors import (
    BackingStoreUnavailable,
    ConflictOnCommit,
    MalformedCode,
    NotFoundError,
)
from core.ledger.models import Account, Transaction, to_decimal
from core.ledger.sources import EntityRecord
from core.ledger.types import DynamicSource

logger = logging.getLogger(__name__)


class LedgerRepository:
    """계정과목/엔티티/전표 저장소

    Args:
        store: 문서 저장소 (SQLiteDocumentStore, InMemoryDocumentStore)

    사용 예시:
    ```python
    repository = LedgerRepository(store)
    accounts = await repository.list_accounts()
    ```
    """

    def __init__(self, store: IDocumentStore):
        self.store = store

    # -------------------------------------------------------------------------
    # 계정과목
    # -------------------------------------------------------------------------

    async def list_accounts(self) -> list[Account]:
        """저장된 계정 전체 조회 (코드 순)

        파싱할 수 없는 레코드는 경고 후 건너뜀.

        Raises:
            BackingStoreUnavailable: 저장소 조회 실패
        """
        async with self._translate("list_accounts"):
            records = await self.store.list(Collections.CHART_OF_ACCOUNTS)

        accounts = []
        for record in records:
            account = self._parse_account(record)
            if account is not None:
                accounts.append(account)

        accounts.sort(key=lambda a: a.code)
        return accounts

    async def get_account(self, account_id: str) -> Account:
        """계정 단건 조회

        Raises:
            NotFoundError: 계정이 없는 경우
            BackingStoreUnavailable: 저장소 조회 실패
        """
        async with self._translate("get_account"):
            record = await self.store.get(Collections.CHART_OF_ACCOUNTS, account_id)

        account = self._parse_account(record) if record else None
        if account is None:
            raise NotFoundError("account", account_id)
        return account

    async def insert_account(self, account: Account) -> None:
        """계정 저장 (코드 유일 제약은 저장소가 보장)

        Raises:
            ConflictOnCommit: 같은 코드가 이미 있는 경우
            BackingStoreUnavailable: 저장 실패
        """
        async with self._translate("insert_account", code=account.code):
            await self.store.put(
                Collections.CHART_OF_ACCOUNTS,
                account.id,
                account.to_record(),
            )

        logger.info(
            "계정 저장",
            extra={"account_id": account.id, "code": account.code},
        )

    async def update_account(self, account_id: str, patch: dict[str, object]) -> None:
        """계정 레코드 부분 수정 (레코드 필드명 기준)

        Raises:
            NotFoundError: 계정이 없는 경우
            BackingStoreUnavailable: 저장 실패
        """
        try:
            async with self._translate("update_account"):
                await self.store.update(Collections.CHART_OF_ACCOUNTS, account_id, patch)
        except DocumentNotFoundError as e:
            raise NotFoundError("account", account_id) from e

    async def delete_account(self, account_id: str) -> None:
        """계정 삭제

        Raises:
            BackingStoreUnavailable: 삭제 실패
        """
        async with self._translate("delete_account"):
            await self.store.delete(Collections.CHART_OF_ACCOUNTS, account_id)

        logger.info("계정 삭제", extra={"account_id": account_id})

    async def seed_accounts(self, accounts: Iterable[Account]) -> int:
        """없는 계정만 저장 (기본 계정과목표 초기화용)

        Returns:
            새로 저장한 계정 수
        """
        existing = {a.code for a in await self.list_accounts()}
        inserted = 0
        for account in accounts:
            if account.code in existing:
                continue
            await self.insert_account(account)
            existing.add(account.code)
            inserted += 1
        return inserted

    # -------------------------------------------------------------------------
    # 동적 엔티티
    # -------------------------------------------------------------------------

    async def list_entities(self, source: DynamicSource) -> list[DocumentRecord]:
        """소스의 원본 엔티티 문서 조회 (ID 순)

        Raises:
            BackingStoreUnavailable: 저장소 조회 실패
        """
        async with self._translate(f"list_entities:{source.name}"):
            if source.collection_group:
                records = await self.store.list_group(source.collection)
            else:
                records = await self.store.list(source.collection)

        return sorted(records, key=lambda r: (r.id, r.path))

    async def get_course_fee(self, course_id: str) -> Decimal:
        """과정 수강료 (feePerStudent, 없으면 price)

        과정이 없으면 0.

        Raises:
            BackingStoreUnavailable: 저장소 조회 실패
        """
        async with self._translate("get_course_fee"):
            record = await self.store.get(Collections.COURSES, course_id)

        if record is None:
            logger.warning("과정 문서 없음", extra={"course_id": course_id})
            return to_decimal(None)

        return to_decimal(record.data.get("feePerStudent") or record.data.get("price"))

    # -------------------------------------------------------------------------
    # 전표
    # -------------------------------------------------------------------------

    async def fetch_transactions(
        self,
        source: DynamicSource,
        entity: EntityRecord,
        include_name_matches: bool = True,
    ) -> list[Transaction]:
        """엔티티 관련 전표 조회

        안정 키(companyId) 조회에 더해, include_name_matches이면
        레거시 이름(companyName) 전표 중 소스 entityType에 해당하는 것도 포함.
        유효하지 않은 전표는 경고 후 건너뜀.

        Raises:
            BackingStoreUnavailable: 저장소 조회 실패
        """
        async with self._translate(f"fetch_transactions:{source.name}"):
            records = await self.store.query(
                Collections.VOUCHERS,
                [Filter("companyId", "==", entity.id)],
            )
            records.extend(
                await self.store.query(
                    Collections.VOUCHERS,
                    [Filter("subjectId", "==", entity.id)],
                )
            )

            if include_name_matches and entity.match_names:
                by_name = await self.store.query(
                    Collections.VOUCHERS,
                    [Filter("companyName", "in", list(entity.match_names))],
                )
                records.extend(
                    r for r in by_name
                    if not (r.data.get("companyId") or r.data.get("subjectId"))
                    and (r.data.get("entityType") or "company") in source.entity_types
                )

        seen: set[str] = set()
        transactions = []
        for record in records:
            if record.path in seen:
                continue
            seen.add(record.path)

            try:
                transactions.append(Transaction.from_record(record.id, record.data))
            except ValueError as e:
                logger.warning(
                    "유효하지 않은 전표 건너뜀",
                    extra={"voucher_id": record.id, "error": str(e)},
                )

        return transactions

    # -------------------------------------------------------------------------
    # 내부 구현
    # -------------------------------------------------------------------------

    @staticmethod
    def _parse_account(record: DocumentRecord) -> Account | None:
        try:
            account = Account.from_record(record.id, record.data)
        except (ValueError, TypeError) as e:
            logger.warning(
                "계정 레코드 파싱 실패, 건너뜀",
                extra={"account_id": record.id, "error": str(e)},
            )
            return None

        if account.parent_id is None:
            try:
                parse_root_code(account.code)
            except MalformedCode:
                logger.warning(
                    "루트 계정 코드 형식 오류",
                    extra={"account_id": account.id, "code": account.code},
                )

        return account

    @asynccontextmanager
    async def _translate(self, operation: str, code: str | None = None) -> AsyncIterator[None]:
        """저장소 예외를 Ledger 예외로 변환

        DocumentNotFoundError는 호출자가 NotFoundError로 처리하도록 그대로 전파.
        """
        try:
            yield
        except DocumentConflictError as e:
            raise ConflictOnCommit(code or str(e.value)) from e
        except DocumentNotFoundError:
            raise
        except DocumentStoreError as e:
            logger.error(
                f"저장소 작업 실패: {operation}",
                extra={"error": e.message},
            )
            raise BackingStoreUnavailable(operation, e.message) from e
