"""
하이브리드 계정과목 뷰

저장된 계정과목에 동적 엔티티(학생, 강사, 거래처, 비용 지급처)의 가상 계정을 합성.

- 저장된 계정 조회 실패는 전파 (빈 계정과목표와 구분 불가)
- 소스 하나의 조회 실패/타임아웃은 경고 후 해당 소스만 제외
- 캐시 없음: 매 호출마다 전체 재계산
"""

import asyncio
import logging
from dataclasses import dataclass, field
from decimal import Decimal

from core.config.loader import LedgerSettings
from core.ledger.errors import LedgerError, NotFoundError
from core.ledger.models import ZERO, Account, VirtualAccount
from core.ledger.reducer import BalanceRequest, BalanceResult, TransactionReducer
from core.ledger.repository import LedgerRepository
from core.ledger.sources import EntityRecord, StudentRecord, parse_entity, to_virtual_account
from core.ledger.tree import check_invariants, roll_up
from core.ledger.types import DynamicSource, SourceKind

logger = logging.getLogger(__name__)


@dataclass
class HybridLedgerResult:
    """하이브리드 뷰 결과

    Attributes:
        accounts: 저장된 계정 + 가상 계정
        warnings: 저하(degrade) 사유 목록
    """

    accounts: list[Account]
    warnings: list[str] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return bool(self.warnings)


@dataclass
class SourceLoad:
    """소스 하나의 로드 결과"""

    source: DynamicSource
    anchor: Account
    records: list[EntityRecord] = field(default_factory=list)
    accounts: list[VirtualAccount] = field(default_factory=list)
    balances: dict[str, BalanceResult] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    @property
    def total_balance(self) -> Decimal:
        return sum((r.balance for r in self.balances.values()), ZERO)


def resolve_anchor(accounts: list[Account], anchor_code: str) -> Account | None:
    """앵커 계정 조회 (코드 우선, 없으면 ID)"""
    for account in accounts:
        if account.code == anchor_code and not account.is_virtual:
            return account
    for account in accounts:
        if account.id == anchor_code and not account.is_virtual:
            return account
    return None


class HybridLedgerView:
    """저장된 계정과목 + 가상 계정 합성 뷰

    Args:
        repository: Ledger 저장소
        settings: Ledger 설정 (소스 목록, 타임아웃, 동시성, 집계 여부)
        reducer: 잔액 계산기 (None이면 설정으로 생성)

    사용 예시:
    ```python
    view = HybridLedgerView(repository, settings)
    result = await view.build()
    for warning in result.warnings:
        ...
    ```
    """

    def __init__(
        self,
        repository: LedgerRepository,
        settings: LedgerSettings | None = None,
        reducer: TransactionReducer | None = None,
    ):
        if settings is None:
            settings = LedgerSettings()
        if reducer is None:
            reducer = TransactionReducer(
                max_concurrency=settings.max_concurrency,
                timeout_sec=settings.fetch_timeout_sec,
                name_match_fallback=settings.name_match_fallback,
            )
        self.repository = repository
        self.settings = settings
        self.reducer = reducer

    async def get_hybrid_accounts(self) -> list[Account]:
        """저장된 계정 + 가상 계정 목록"""
        result = await self.build()
        return result.accounts

    async def build(self) -> HybridLedgerResult:
        """하이브리드 뷰 생성

        Raises:
            BackingStoreUnavailable: 저장된 계정과목 조회 실패
        """
        accounts = await self.repository.list_accounts()
        warnings: list[str] = []
        virtual: list[Account] = []
        taken = {a.code for a in accounts}

        for source in self.settings.sources:
            anchor = resolve_anchor(accounts, source.anchor_code)
            if anchor is None:
                message = f"{source.name}: anchor account {source.anchor_code} not found"
                logger.warning(
                    "앵커 계정 없음, 소스 건너뜀",
                    extra={"source": source.name, "anchor_code": source.anchor_code},
                )
                warnings.append(message)
                continue

            load = await self._load_source(source, anchor, taken)
            warnings.extend(load.warnings)
            virtual.extend(load.accounts)

        merged = accounts + virtual
        if self.settings.roll_up:
            merged = roll_up(merged)

        for violation in check_invariants(merged):
            logger.warning("계정과목 불변식 위반", extra={"violation": violation})
            warnings.append(violation)

        logger.debug(
            "하이브리드 뷰 생성",
            extra={
                "static": len(accounts),
                "virtual": len(virtual),
                "warnings": len(warnings),
            },
        )

        return HybridLedgerResult(accounts=merged, warnings=warnings)

    async def compute_source_balances(self, source_name: str) -> SourceLoad:
        """소스 하나의 엔티티별 잔액 (카테고리 화면용)

        Raises:
            NotFoundError: 소스 또는 앵커 계정이 없는 경우
            BackingStoreUnavailable: 저장된 계정과목 조회 실패
        """
        source = self.settings.get_source(source_name)
        if source is None:
            raise NotFoundError("source", source_name)

        accounts = await self.repository.list_accounts()
        anchor = resolve_anchor(accounts, source.anchor_code)
        if anchor is None:
            raise NotFoundError("anchor account", source.anchor_code)

        return await self._load_source(
            source,
            anchor,
            {a.code for a in accounts},
            force_balances=True,
        )

    # -------------------------------------------------------------------------
    # 내부 구현
    # -------------------------------------------------------------------------

    async def _load_source(
        self,
        source: DynamicSource,
        anchor: Account,
        taken: set[str],
        force_balances: bool = False,
    ) -> SourceLoad:
        """소스 엔티티 로드 → 가상 계정 합성 → 잔액 적용

        실패 시 빈 SourceLoad와 경고 반환. taken은 성공한 경우에만 갱신.
        """
        load = SourceLoad(source=source, anchor=anchor)

        try:
            documents = await asyncio.wait_for(
                self.repository.list_entities(source),
                timeout=self.settings.fetch_timeout_sec,
            )
        except asyncio.TimeoutError:
            return self._skipped(load, f"entity fetch timed out after {self.settings.fetch_timeout_sec}s")
        except LedgerError as e:
            return self._skipped(load, str(e))

        seen: set[str] = set()
        for document in documents:
            record = parse_entity(source.kind, document)
            if record.id in seen:
                logger.warning(
                    "중복 엔티티 ID 건너뜀",
                    extra={"source": source.name, "entity_id": record.id, "path": document.path},
                )
                continue
            seen.add(record.id)
            load.records.append(record)

        source_taken = set(taken)
        load.accounts = [
            to_virtual_account(source, record, anchor, source_taken)
            for record in load.records
        ]

        if source.compute_balances or force_balances:
            obligations = await self._obligations(source, load)
            load.balances = await self._balances(source, anchor, load.records, obligations)
            load.warnings.extend(r.warning for r in load.balances.values() if r.warning)

            load.accounts = [
                account.with_totals(*load.balances[account.id].journal_totals(anchor.kind))
                for account in load.accounts
            ]

        taken |= source_taken
        return load

    async def _obligations(self, source: DynamicSource, load: SourceLoad) -> dict[str, Decimal]:
        """엔티티별 의무액 (학생: 과정 수강료, 그 외: 기초 잔액)"""
        if source.kind != SourceKind.STUDENT:
            return {record.id: record.opening_balance for record in load.records}

        course_ids = sorted({
            record.course_id
            for record in load.records
            if isinstance(record, StudentRecord) and record.course_id
        })

        fees: dict[str, Decimal] = {}
        for course_id in course_ids:
            try:
                fees[course_id] = await asyncio.wait_for(
                    self.repository.get_course_fee(course_id),
                    timeout=self.settings.fetch_timeout_sec,
                )
            except (LedgerError, asyncio.TimeoutError) as e:
                reason = str(e) or type(e).__name__
                logger.warning(
                    "수강료 조회 실패, 0 처리",
                    extra={"course_id": course_id, "reason": reason},
                )
                load.warnings.append(f"course {course_id}: fee unavailable ({reason})")
                fees[course_id] = ZERO

        obligations = {}
        for record in load.records:
            course_id = record.course_id if isinstance(record, StudentRecord) else None
            obligations[record.id] = fees.get(course_id, ZERO) if course_id else ZERO
        return obligations

    async def _balances(
        self,
        source: DynamicSource,
        anchor: Account,
        records: list[EntityRecord],
        obligations: dict[str, Decimal],
    ) -> dict[str, BalanceResult]:
        by_id = {record.id: record for record in records}

        async def loader(request: BalanceRequest):
            return await self.repository.fetch_transactions(
                source,
                by_id[request.entity_key],
                include_name_matches=self.settings.name_match_fallback,
            )

        requests = [
            BalanceRequest(
                entity_key=record.id,
                obligation=obligations.get(record.id, ZERO),
                convention=source.convention,
                kind=anchor.kind,
                fallback_names=record.match_names,
            )
            for record in records
        ]
        return await self.reducer.compute_balances(requests, loader)

    @staticmethod
    def _skipped(load: SourceLoad, reason: str) -> SourceLoad:
        logger.warning(
            "동적 소스 로드 실패, 건너뜀",
            extra={"source": load.source.name, "reason": reason},
        )
        load.warnings.append(f"{load.source.name}: {reason}")
        return load
