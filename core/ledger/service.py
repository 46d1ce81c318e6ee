"""
계정과목 관리 서비스

계정 생성(코드 할당 + 충돌 재시도), 수정, 삭제, 기본 계정과목표 초기화.
쓰기 실패는 항상 호출자에게 전파.
"""

import logging
from typing import Any
from uuid import uuid4

from core.config.loader import LedgerSettings
from core.ledger.codes import next_code
from core.ledger.errors import (
    AccountInUseError,
    ConflictOnCommit,
    LedgerError,
    NotFoundError,
    ReadOnlyAccountError,
)
from core.ledger.models import Account
from core.ledger.repository import LedgerRepository
from core.ledger.tree import children_of, validate_placement
from core.ledger.types import DEFAULT_ACCOUNTS, AccountKind

logger = logging.getLogger(__name__)


# 수정 가능한 필드 → 저장 레코드 필드
_EDITABLE_FIELDS: dict[str, str] = {
    "name": "name",
    "localized_name": "nameAr",
    "is_leaf": "isLeaf",
    "currency": "currency",
}

# 생성 후 변경 불가 (코드 체인/잔액 부호가 깨짐)
_IMMUTABLE_FIELDS = frozenset({"code", "kind", "parent_id"})


def default_chart() -> list[Account]:
    """기본 계정과목표 (문서 ID = 코드)"""
    return [
        Account(
            id=code,
            code=code,
            name=name,
            localized_name=localized_name,
            parent_id=parent_code,
            kind=AccountKind(kind),
            level=level,
        )
        for code, name, localized_name, parent_code, kind, level in DEFAULT_ACCOUNTS
    ]


class AccountService:
    """계정과목 관리 서비스

    Args:
        repository: Ledger 저장소
        settings: Ledger 설정 (충돌 재시도 횟수, 동적 소스 앵커)

    사용 예시:
    ```python
    service = AccountService(repository, settings)
    account = await service.create_account("Petty Cash", parent_id="101")
    ```
    """

    def __init__(self, repository: LedgerRepository, settings: LedgerSettings | None = None):
        if settings is None:
            settings = LedgerSettings()
        self.repository = repository
        self.settings = settings

    async def suggest_code(self, parent_id: str | None = None) -> str:
        """부모 아래 다음 코드 제안 (확정 아님)

        Raises:
            NotFoundError: 부모 계정이 없는 경우
        """
        accounts = await self.repository.list_accounts()
        parent = await self._find_parent(accounts, parent_id)
        return next_code(accounts, parent)

    async def create_account(
        self,
        name: str,
        parent_id: str | None = None,
        kind: AccountKind | None = None,
        localized_name: str = "",
        is_leaf: bool = False,
        currency: str | None = None,
        code: str | None = None,
    ) -> Account:
        """계정 생성

        code를 생략하면 할당 → 검증 → 저장을 반복하며,
        동시 생성으로 코드가 충돌하면 최신 목록으로 재할당 (commit_retries회까지).
        code를 지정하면 재시도 없이 검증 후 저장.

        Args:
            name: 계정 이름
            parent_id: 부모 계정 ID (None이면 루트)
            kind: 계정 유형 (하위 계정은 생략 시 부모 유형, 다르게 지정 가능. 루트는 필수)
            localized_name: 현지화 이름
            is_leaf: 리프 여부
            currency: 표시용 통화 태그
            code: 직접 지정할 코드

        Returns:
            저장된 계정

        Raises:
            NotFoundError: 부모 계정이 없는 경우
            ValueError: 루트 계정에 유형이 없는 경우
            InvalidPlacementError: 지정한 코드가 조상 체인과 맞지 않는 경우
            ConflictOnCommit: 재시도 후에도 코드가 충돌하는 경우
            BackingStoreUnavailable: 저장소 실패
        """
        if not name or not name.strip():
            raise ValueError("Account name is required")

        attempts = 1 if code is not None else self.settings.commit_retries
        last_code = code or ""

        for attempt in range(1, attempts + 1):
            accounts = await self.repository.list_accounts()
            parent = await self._find_parent(accounts, parent_id)
            account_kind = self._resolve_kind(parent, kind)

            candidate = code if code is not None else next_code(accounts, parent)
            last_code = candidate
            validate_placement(accounts, candidate, parent)

            # 리프 부모는 자식 저장 전에 비리프로 전환
            if parent is not None and parent.is_leaf:
                await self.repository.update_account(parent.id, {"isLeaf": False})

            account = Account(
                id=uuid4().hex,
                code=candidate,
                name=name.strip(),
                kind=account_kind,
                parent_id=parent.id if parent else None,
                localized_name=localized_name or name.strip(),
                is_leaf=is_leaf,
                level=parent.level + 1 if parent else 0,
                currency=currency,
            )

            try:
                await self.repository.insert_account(account)
            except ConflictOnCommit:
                logger.warning(
                    "계정 코드 충돌, 재할당",
                    extra={"code": candidate, "attempt": attempt, "max_attempts": attempts},
                )
                continue

            logger.info(
                "계정 생성",
                extra={"account_id": account.id, "code": account.code, "attempt": attempt},
            )
            return account

        raise ConflictOnCommit(last_code, attempts)

    async def update_account(self, account_id: str, patch: dict[str, Any]) -> Account:
        """계정 수정 (name, localized_name, is_leaf, currency만 허용)

        Raises:
            NotFoundError: 계정이 없는 경우
            ReadOnlyAccountError: 가상 계정 ID인 경우
            ValueError: 변경 불가/알 수 없는 필드
            AccountInUseError: 하위 계정이 있는데 리프로 지정하는 경우
        """
        immutable = _IMMUTABLE_FIELDS.intersection(patch)
        if immutable:
            raise ValueError(f"Fields cannot be changed after creation: {sorted(immutable)}")

        unknown = set(patch) - set(_EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown account fields: {sorted(unknown)}")

        accounts = await self.repository.list_accounts()
        account = await self._find_persisted(accounts, account_id)

        if patch.get("is_leaf") and children_of(accounts, account.id):
            raise AccountInUseError(account.id, "account has child accounts")

        if "name" in patch and not str(patch["name"] or "").strip():
            raise ValueError("Account name is required")

        record_patch = {_EDITABLE_FIELDS[key]: value for key, value in patch.items()}
        if record_patch:
            await self.repository.update_account(account.id, record_patch)

        logger.info(
            "계정 수정",
            extra={"account_id": account.id, "fields": sorted(patch)},
        )
        return await self.repository.get_account(account.id)

    async def delete_account(self, account_id: str) -> None:
        """계정 삭제

        하위 계정이 있거나 동적 소스의 앵커인 계정은 삭제 불가.

        Raises:
            NotFoundError: 계정이 없는 경우
            ReadOnlyAccountError: 가상 계정 ID인 경우
            AccountInUseError: 사용 중인 계정
        """
        accounts = await self.repository.list_accounts()
        account = await self._find_persisted(accounts, account_id)

        if children_of(accounts, account.id):
            raise AccountInUseError(account.id, "account has child accounts")

        anchored = [s.name for s in self.settings.sources if s.anchor_code == account.code]
        if anchored:
            raise AccountInUseError(account.id, f"anchor of dynamic source {anchored[0]}")

        await self.repository.delete_account(account.id)

    async def initialize_default_chart(self) -> int:
        """계정과목표가 비어 있으면 기본 계정과목표 저장

        Returns:
            새로 저장한 계정 수 (이미 있으면 0)
        """
        accounts = await self.repository.list_accounts()
        if accounts:
            logger.debug("계정과목표가 이미 존재, 초기화 생략", extra={"count": len(accounts)})
            return 0

        inserted = await self.repository.seed_accounts(default_chart())
        logger.info("기본 계정과목표 초기화", extra={"inserted": inserted})
        return inserted

    # -------------------------------------------------------------------------
    # 내부 구현
    # -------------------------------------------------------------------------

    async def _find_parent(self, accounts: list[Account], parent_id: str | None) -> Account | None:
        if parent_id is None:
            return None
        for account in accounts:
            if account.id == parent_id:
                return account
        if await self._is_virtual(parent_id):
            raise ReadOnlyAccountError(parent_id)
        raise NotFoundError("parent account", parent_id)

    async def _find_persisted(self, accounts: list[Account], account_id: str) -> Account:
        for account in accounts:
            if account.id == account_id:
                return account
        if await self._is_virtual(account_id):
            raise ReadOnlyAccountError(account_id)
        raise NotFoundError("account", account_id)

    async def _is_virtual(self, account_id: str) -> bool:
        """저장되지 않은 ID가 동적 엔티티(가상 계정)인지 확인"""
        for source in self.settings.sources:
            try:
                entities = await self.repository.list_entities(source)
            except LedgerError as e:
                logger.debug(
                    "가상 계정 판별 중 소스 조회 실패",
                    extra={"source": source.name, "error": str(e)},
                )
                continue
            if any(entity.id == account_id for entity in entities):
                return True
        return False

    @staticmethod
    def _resolve_kind(parent: Account | None, kind: AccountKind | None) -> AccountKind:
        if parent is None:
            if kind is None:
                raise ValueError("Root accounts require an account kind")
            return kind
        return kind if kind is not None else parent.kind
