"""
계정과목 트리

평면 계정 목록을 부모/자식 계층으로 구성하고 구조 질의에 응답.

복구 정책:
- 부모를 찾을 수 없는 계정(고아)은 루트로 표시
- 부모 순환에 걸린 계정도 사라지지 않도록 루트로 표시
"""

import logging
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, Callable, Iterable

from core.ledger.codes import parse_code_suffix, parse_root_code
from core.ledger.errors import (
    ConflictOnCommit,
    InvalidPlacementError,
    MalformedCode,
    ReadOnlyAccountError,
)
from core.ledger.models import ZERO, Account
from core.ledger.types import SiblingOrder

logger = logging.getLogger(__name__)


@dataclass
class AccountNode:
    """트리 노드"""
    
    account: Account
    children: list["AccountNode"] = field(default_factory=list)
    
    def to_dict(self) -> dict[str, Any]:
        """딕셔너리로 변환 (API 응답용, 재귀)"""
        data = self.account.to_dict()
        data["children"] = [child.to_dict() for child in self.children]
        return data


def _sort_key(order: SiblingOrder) -> Callable[[Account], Any]:
    if order == SiblingOrder.NUMERIC:
        return lambda account: (len(account.code), account.code)
    # 문자열 비교: "10"이 "2"보다 앞에 옴
    return lambda account: account.code


def build(
    accounts: Iterable[Account],
    order: SiblingOrder = SiblingOrder.LEXICAL,
) -> list[AccountNode]:
    """평면 계정 목록에서 포리스트 생성
    
    Args:
        accounts: 계정 목록
        order: 형제 정렬 방식 (기본: 문자열 비교)
        
    Returns:
        루트 노드 목록 (고아/순환 계정 포함)
    """
    accounts = list(accounts)
    by_id = {account.id: account for account in accounts}
    key = _sort_key(order)
    
    roots: list[Account] = []
    children: dict[str, list[Account]] = {}
    
    for account in accounts:
        if account.parent_id is None:
            roots.append(account)
        elif account.parent_id not in by_id or account.parent_id == account.id:
            logger.warning(
                "고아 계정, 루트로 표시",
                extra={"account_id": account.id, "parent_id": account.parent_id},
            )
            roots.append(account)
        else:
            children.setdefault(account.parent_id, []).append(account)
    
    visited: set[str] = set()
    
    def attach(account: Account) -> AccountNode:
        visited.add(account.id)
        node = AccountNode(account=account)
        for child in sorted(children.get(account.id, []), key=key):
            if child.id not in visited:
                node.children.append(attach(child))
        return node
    
    forest = [attach(account) for account in sorted(roots, key=key) if account.id not in visited]
    
    # 순환에 걸려 루트에서 도달할 수 없는 계정
    leftover = [a for a in accounts if a.id not in visited]
    while leftover:
        account = min(leftover, key=key)
        logger.warning(
            "부모 순환 감지, 루트로 표시",
            extra={"account_id": account.id, "parent_id": account.parent_id},
        )
        forest.append(attach(account))
        leftover = [a for a in leftover if a.id not in visited]
    
    return forest


def find_path(accounts: Iterable[Account], account_id: str) -> list[str]:
    """조상 코드 경로 (루트 먼저, 자기 코드로 끝남)
    
    알 수 없는 ID는 빈 목록. 고아/순환 지점에서 중단.
    
    Example:
        "1" → "10" → "101" 구조에서 find_path(accounts, id_of_101) == ["1", "10", "101"]
    """
    by_id = {account.id: account for account in accounts}
    current = by_id.get(account_id)
    
    path: list[str] = []
    seen: set[str] = set()
    while current is not None and current.id not in seen:
        seen.add(current.id)
        path.append(current.code)
        current = by_id.get(current.parent_id) if current.parent_id else None
    
    path.reverse()
    return path


def children_of(accounts: Iterable[Account], account_id: str) -> list[Account]:
    """직계 하위 계정 목록"""
    return [account for account in accounts if account.parent_id == account_id]


def validate_placement(
    accounts: Iterable[Account],
    code: str,
    parent: Account | None,
) -> None:
    """새 코드가 기존 계정 및 조상 체인과 일관적인지 검증
    
    Raises:
        ConflictOnCommit: 이미 사용 중인 코드
        InvalidPlacementError: 접두사/접미사 규칙 위반
        ReadOnlyAccountError: 가상 계정 아래 배치 시도
    """
    accounts = list(accounts)
    
    if any(account.code == code for account in accounts):
        raise ConflictOnCommit(code)
    
    if parent is None:
        try:
            parse_root_code(code)
        except MalformedCode as e:
            raise InvalidPlacementError(f"Root code must be a single numeric segment: '{code}'") from e
        return
    
    if parent.is_virtual:
        raise ReadOnlyAccountError(parent.id)
    
    try:
        parse_code_suffix(code, parent.code)
    except MalformedCode as e:
        raise InvalidPlacementError(
            f"Code '{code}' is not parent code '{parent.code}' followed by a positive integer"
        ) from e
    
    for ancestor_code in find_path(accounts, parent.id):
        if not code.startswith(ancestor_code):
            raise InvalidPlacementError(
                f"Code '{code}' does not start with ancestor code '{ancestor_code}'"
            )


def check_invariants(accounts: Iterable[Account]) -> list[str]:
    """트리 불변식 위반 목록
    
    - 코드 유일성
    - 하위 계정 코드의 부모 코드 접두사
    - 저장 계정의 숫자 접미사 / 루트 단일 세그먼트
    
    가상 계정은 유일성과 접두사만 검사.
    
    Returns:
        위반 설명 목록 (없으면 빈 목록)
    """
    accounts = list(accounts)
    by_id = {account.id: account for account in accounts}
    violations: list[str] = []
    
    seen_codes: dict[str, str] = {}
    for account in accounts:
        if account.code in seen_codes and seen_codes[account.code] != account.id:
            violations.append(
                f"duplicate code '{account.code}': {seen_codes[account.code]}, {account.id}"
            )
        seen_codes.setdefault(account.code, account.id)
    
    for account in accounts:
        parent = by_id.get(account.parent_id) if account.parent_id else None
        
        if account.parent_id is None:
            if account.is_virtual:
                continue
            try:
                parse_root_code(account.code)
            except MalformedCode:
                violations.append(f"root code '{account.code}' is not a single numeric segment")
            continue
        
        if parent is None:
            # 고아 계정은 트리에서 루트로 복구되므로 위반으로 보지 않음
            continue
        
        if not account.code.startswith(parent.code):
            violations.append(
                f"code '{account.code}' does not start with parent code '{parent.code}'"
            )
        elif not account.is_virtual:
            try:
                parse_code_suffix(account.code, parent.code)
            except MalformedCode:
                violations.append(f"code '{account.code}' has a non-numeric suffix")
    
    return violations


def roll_up(accounts: Iterable[Account]) -> list[Account]:
    """하위 계정 합계를 부모로 집계한 사본 목록
    
    하위가 있는 계정: 차변/대변 = 하위 합계 (리프 표시된 계정은 자기 금액도 포함)
    하위가 없는 계정: 자기 금액 유지
    
    Returns:
        입력 순서를 유지한 계정 사본 목록
    """
    accounts = list(accounts)
    result: dict[str, Account] = {}
    
    def visit(node: AccountNode) -> tuple[Decimal, Decimal]:
        account = node.account
        if not node.children:
            result[account.id] = replace(account)
            return account.debit_total, account.credit_total
        
        debit = ZERO
        credit = ZERO
        for child in node.children:
            child_debit, child_credit = visit(child)
            debit += child_debit
            credit += child_credit
        
        if account.is_leaf:
            debit += account.debit_total
            credit += account.credit_total
        
        result[account.id] = account.with_totals(debit, credit)
        return debit, credit
    
    for root in build(accounts):
        visit(root)
    
    return [result.get(account.id, account) for account in accounts]
