"""
전표 리듀서

엔티티별 전표를 입금/출금으로 분리 집계하고 의무액(수강료, 기초 잔액)과 상계해 잔액 계산.

잔액 부호 규칙은 엔티티 종류(소스)에 붙어 다님:
- OBLIGATION: 입금 - 의무액 (음수 = 미납)
- EXPENSE: 출금 - 입금 (양수 = 순지출)
- LEDGER: 계정 유형의 정상 잔액 방향 기준 순액 (의무액은 기초 잔액)
"""

import asyncio
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Awaitable, Callable, Iterable, Sequence

from core.constants import Defaults
from core.ledger.errors import LedgerError
from core.ledger.models import ZERO, Transaction, signed_balance
from core.ledger.types import AccountKind, BalanceConvention, Direction, JournalSide

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BalanceRequest:
    """엔티티 하나의 잔액 계산 요청

    Attributes:
        entity_key: 안정 키 (엔티티 문서 ID)
        obligation: 의무액 / 기초 잔액
        convention: 잔액 부호 규칙
        kind: 계정 유형 (LEDGER 규칙 및 차변/대변 배치에 사용)
        fallback_names: 안정 키가 없는 레거시 전표용 이름 목록
    """

    entity_key: str
    obligation: Decimal = ZERO
    convention: BalanceConvention = BalanceConvention.OBLIGATION
    kind: AccountKind | None = None
    fallback_names: tuple[str, ...] = ()


@dataclass(frozen=True)
class BalanceResult:
    """엔티티 잔액 계산 결과"""

    entity_key: str
    convention: BalanceConvention
    inflow: Decimal = ZERO
    outflow: Decimal = ZERO
    obligation: Decimal = ZERO
    balance: Decimal = ZERO
    matched: int = 0
    name_matched: int = 0
    degraded: bool = False
    warning: str | None = None

    def journal_totals(self, kind: AccountKind) -> tuple[Decimal, Decimal]:
        """계정 트리용 (차변, 대변) 합계

        출금(지급) → 차변, 입금(수령) → 대변, 의무액 → 계정 유형의 정상 잔액 방향.
        """
        debit = self.outflow
        credit = self.inflow
        if kind.normal_side == JournalSide.DEBIT:
            debit += self.obligation
        else:
            credit += self.obligation
        return debit, credit

    def to_dict(self) -> dict[str, object]:
        """딕셔너리로 변환 (API 응답용)"""
        return {
            "entity_key": self.entity_key,
            "convention": self.convention.value,
            "inflow": str(self.inflow),
            "outflow": str(self.outflow),
            "obligation": str(self.obligation),
            "balance": str(self.balance),
            "matched": self.matched,
            "name_matched": self.name_matched,
            "degraded": self.degraded,
            "warning": self.warning,
        }


def _match(
    transaction: Transaction,
    entity_key: str,
    fallback_names: Iterable[str],
) -> str | None:
    """전표 귀속 판정

    Returns:
        "key" (안정 키 일치), "name" (레거시 이름 일치), None (무관)
    """
    if transaction.subject_key == entity_key:
        return "key"
    if transaction.subject_id is None and transaction.subject_name in fallback_names:
        return "name"
    return None


def reduce_transactions(
    entity_key: str,
    obligation_amount: Decimal,
    transactions: Iterable[Transaction],
    convention: BalanceConvention = BalanceConvention.OBLIGATION,
    *,
    kind: AccountKind | None = None,
    fallback_names: Iterable[str] = (),
) -> BalanceResult:
    """엔티티 전표 집계

    Args:
        entity_key: 엔티티 안정 키
        obligation_amount: 의무액 / 기초 잔액
        transactions: 전표 목록 (다른 엔티티 전표가 섞여 있어도 됨)
        convention: 잔액 부호 규칙
        kind: 계정 유형 (LEDGER 규칙에서 필수)
        fallback_names: 안정 키가 없는 전표에 허용할 이름 (deprecated 호환 경로)

    Returns:
        BalanceResult

    Raises:
        ValueError: LEDGER 규칙인데 kind가 없는 경우
    """
    fallback_names = tuple(fallback_names)
    inflow = ZERO
    outflow = ZERO
    matched = 0
    name_matched = 0

    for transaction in transactions:
        how = _match(transaction, entity_key, fallback_names)
        if how is None:
            continue

        matched += 1
        if how == "name":
            name_matched += 1
            logger.warning(
                "이름 기반 전표 매칭 사용 (안정 키 없음)",
                extra={
                    "entity_key": entity_key,
                    "transaction_id": transaction.id,
                    "subject_name": transaction.subject_name,
                },
            )

        if transaction.direction == Direction.INFLOW:
            inflow += transaction.amount
        else:
            outflow += transaction.amount

    if convention == BalanceConvention.OBLIGATION:
        balance = inflow - obligation_amount
    elif convention == BalanceConvention.EXPENSE:
        balance = outflow - inflow
    else:
        if kind is None:
            raise ValueError("LEDGER convention requires an account kind")
        debit = outflow
        credit = inflow
        if kind.normal_side == JournalSide.DEBIT:
            debit += obligation_amount
        else:
            credit += obligation_amount
        balance = signed_balance(debit, credit, kind)

    return BalanceResult(
        entity_key=entity_key,
        convention=convention,
        inflow=inflow,
        outflow=outflow,
        obligation=obligation_amount,
        balance=balance,
        matched=matched,
        name_matched=name_matched,
    )


def compute_balance(
    entity_key: str,
    obligation_amount: Decimal,
    transactions: Iterable[Transaction],
    convention: BalanceConvention = BalanceConvention.OBLIGATION,
    *,
    kind: AccountKind | None = None,
    fallback_names: Iterable[str] = (),
) -> Decimal:
    """엔티티 잔액 계산

    Example:
        수강료 5000, 입금 3000 (OBLIGATION) → -2000 (미납)
        출금 1200, 입금 200 (EXPENSE) → 1000
    """
    return reduce_transactions(
        entity_key,
        obligation_amount,
        transactions,
        convention,
        kind=kind,
        fallback_names=fallback_names,
    ).balance


TransactionLoader = Callable[[BalanceRequest], Awaitable[Sequence[Transaction]]]


class TransactionReducer:
    """엔티티 잔액 일괄 계산기

    엔티티별 전표 조회를 동시 실행(세마포어로 제한)하고 조회마다 타임아웃 적용.
    조회 실패/타임아웃은 해당 엔티티만 0 잔액 + 경고로 저하되며 일괄 처리는 실패하지 않음.

    Args:
        max_concurrency: 동시 조회 상한
        timeout_sec: 엔티티별 조회 타임아웃 (초)
        name_match_fallback: 레거시 이름 매칭 허용 여부

    사용 예시:
    ```python
    reducer = TransactionReducer(max_concurrency=8, timeout_sec=5.0)
    results = await reducer.compute_balances(requests, loader)
    ```
    """

    def __init__(
        self,
        max_concurrency: int = Defaults.MAX_CONCURRENCY,
        timeout_sec: float = Defaults.FETCH_TIMEOUT_SEC,
        name_match_fallback: bool = True,
    ):
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1: {max_concurrency}")
        self.max_concurrency = max_concurrency
        self.timeout_sec = timeout_sec
        self.name_match_fallback = name_match_fallback

    async def compute_balances(
        self,
        requests: Iterable[BalanceRequest],
        loader: TransactionLoader,
    ) -> dict[str, BalanceResult]:
        """요청별 잔액 계산

        Args:
            requests: 잔액 계산 요청 목록
            loader: 요청에 해당하는 전표를 조회하는 코루틴 함수

        Returns:
            entity_key → BalanceResult (요청 순서 유지)
        """
        requests = list(requests)
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def run(request: BalanceRequest) -> BalanceResult:
            async with semaphore:
                return await self._compute_one(request, loader)

        results = await asyncio.gather(*(run(r) for r in requests))

        degraded = sum(1 for r in results if r.degraded)
        if degraded:
            logger.warning(
                "일부 엔티티 잔액 계산 실패",
                extra={"total": len(results), "degraded": degraded},
            )

        return {result.entity_key: result for result in results}

    async def _compute_one(
        self,
        request: BalanceRequest,
        loader: TransactionLoader,
    ) -> BalanceResult:
        try:
            transactions = await asyncio.wait_for(loader(request), timeout=self.timeout_sec)
        except asyncio.TimeoutError:
            return self._degraded(request, f"transaction fetch timed out after {self.timeout_sec}s")
        except LedgerError as e:
            return self._degraded(request, str(e))

        return reduce_transactions(
            request.entity_key,
            request.obligation,
            transactions,
            request.convention,
            kind=request.kind,
            fallback_names=request.fallback_names if self.name_match_fallback else (),
        )

    @staticmethod
    def _degraded(request: BalanceRequest, reason: str) -> BalanceResult:
        logger.warning(
            "엔티티 전표 조회 실패, 잔액 0 처리",
            extra={"entity_key": request.entity_key, "reason": reason},
        )
        return BalanceResult(
            entity_key=request.entity_key,
            convention=request.convention,
            degraded=True,
            warning=f"{request.entity_key}: {reason}",
        )
