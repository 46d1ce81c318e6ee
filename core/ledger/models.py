"""
계정과목/전표 도메인 모델

모든 금액은 Decimal 타입 사용.
저장 레코드의 필드명(nameAr, parentId, type, isLeaf 등)은 대시보드 문서 스키마를 그대로 따름.
"""

from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation
from typing import Any

from core.ledger.types import AccountKind, Direction, JournalSide


ZERO = Decimal("0")


def to_decimal(value: Any) -> Decimal:
    """레코드 값을 Decimal로 변환
    
    비어 있거나 숫자가 아닌 값(NaN, Infinity 포함)은 0으로 처리.
    
    Example:
        >>> to_decimal("5000")
        Decimal('5000')
        >>> to_decimal(None)
        Decimal('0')
    """
    if value is None or value == "":
        return ZERO
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return ZERO
    if not result.is_finite():
        return ZERO
    return result


def signed_balance(debit: Decimal, credit: Decimal, kind: AccountKind) -> Decimal:
    """계정 유형의 정상 잔액 방향에 따른 잔액
    
    자산/비용: 차변 - 대변
    부채/자본/수익: 대변 - 차변
    """
    if kind.normal_side == JournalSide.DEBIT:
        return debit - credit
    return credit - debit


@dataclass
class Account:
    """계정과목 노드
    
    Attributes:
        id: 문서 ID
        code: 계층 코드 (부모 코드가 접두사, 전역 유일)
        name: 표시 이름
        kind: 계정 유형 (생성 시 고정)
        parent_id: 부모 계정 ID (루트는 None)
        localized_name: 현지화 표시 이름 (nameAr)
        is_leaf: 하위 계정이 없을 것으로 예상되는지 여부
        level: 트리 깊이 (루트 = 0)
        currency: 표시용 통화 태그 (환산 없음)
        debit_total: 차변 합계 (파생값)
        credit_total: 대변 합계 (파생값)
        balance: 잔액 (파생값, 부호는 signed_balance 규칙)
    """
    
    id: str
    code: str
    name: str
    kind: AccountKind
    parent_id: str | None = None
    localized_name: str = ""
    is_leaf: bool = False
    level: int = 0
    currency: str | None = None
    debit_total: Decimal = ZERO
    credit_total: Decimal = ZERO
    balance: Decimal = ZERO
    
    @property
    def is_virtual(self) -> bool:
        """가상 계정 여부"""
        return False
    
    @property
    def is_root(self) -> bool:
        """루트 계정 여부"""
        return self.parent_id is None
    
    @property
    def display_name(self) -> str:
        """현지화 이름 우선 표시 이름"""
        return self.localized_name or self.name
    
    def with_totals(self, debit: Decimal, credit: Decimal) -> "Account":
        """차변/대변 합계를 적용한 사본 반환 (잔액 재계산)"""
        return replace(
            self,
            debit_total=debit,
            credit_total=credit,
            balance=signed_balance(debit, credit, self.kind),
        )
    
    def to_record(self) -> dict[str, Any]:
        """저장용 레코드로 변환 (문서 ID 제외)
        
        파생값(차변/대변/잔액)은 저장하지 않음.
        """
        return {
            "code": self.code,
            "name": self.name,
            "nameAr": self.localized_name,
            "parentId": self.parent_id,
            "type": self.kind.value,
            "level": self.level,
            "isLeaf": self.is_leaf,
            "currency": self.currency,
        }
    
    def to_dict(self) -> dict[str, Any]:
        """딕셔너리로 변환 (API 응답용)"""
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "localized_name": self.localized_name,
            "parent_id": self.parent_id,
            "kind": self.kind.value,
            "is_leaf": self.is_leaf,
            "level": self.level,
            "currency": self.currency,
            "debit_total": str(self.debit_total),
            "credit_total": str(self.credit_total),
            "balance": str(self.balance),
            "is_virtual": self.is_virtual,
            "source": None,
        }
    
    @staticmethod
    def from_record(doc_id: str, data: dict[str, Any]) -> "Account":
        """저장 레코드에서 생성
        
        Raises:
            ValueError: type 필드가 유효한 계정 유형이 아닌 경우
        """
        name = data.get("name") or data.get("nameAr") or ""
        return Account(
            id=doc_id,
            code=str(data.get("code", "")),
            name=name,
            kind=AccountKind(data.get("type", AccountKind.ASSET.value)),
            parent_id=data.get("parentId"),
            localized_name=data.get("nameAr") or name,
            is_leaf=bool(data.get("isLeaf", False)),
            level=int(data.get("level") or 0),
            currency=data.get("currency"),
            debit_total=to_decimal(data.get("debit")),
            credit_total=to_decimal(data.get("credit")),
            balance=to_decimal(data.get("balance")),
        )


@dataclass
class VirtualAccount(Account):
    """외부 엔티티(학생, 강사 등)의 계정 형태 투영
    
    저장되지 않고 조회 시 합성됨. 항상 리프이며 앵커 계정 아래에 위치.
    하위 계정 생성/수정/삭제 불가.
    """
    
    is_leaf: bool = True
    source: str = ""
    
    @property
    def is_virtual(self) -> bool:
        return True
    
    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["source"] = self.source
        return data


@dataclass(frozen=True)
class Transaction:
    """전표 (불변)
    
    Attributes:
        id: 전표 ID
        amount: 금액 (항상 0 이상)
        direction: 입금(receipt) / 출금(payment)
        subject_id: 안정 키 (companyId / subjectId)
        subject_name: 레거시 이름 키 (companyName)
        entity_type: 엔티티 종류 태그 (student, instructor, company, expense)
        category: 선택 분류 태그
        date: 전표 일자 (원본 문자열)
    """
    
    id: str
    amount: Decimal
    direction: Direction
    subject_id: str | None = None
    subject_name: str | None = None
    entity_type: str = "company"
    category: str | None = None
    date: str | None = None
    
    def __post_init__(self) -> None:
        if not self.amount.is_finite() or self.amount < 0:
            raise ValueError(f"Transaction amount must be a non-negative number: {self.id} ({self.amount})")
    
    @property
    def subject_key(self) -> str | None:
        """귀속 엔티티 키 (안정 키 우선)"""
        return self.subject_id or self.subject_name
    
    @staticmethod
    def from_record(doc_id: str, data: dict[str, Any]) -> "Transaction":
        """전표 레코드에서 생성
        
        Raises:
            ValueError: type이 receipt/payment가 아니거나 금액이 음수인 경우
        """
        return Transaction(
            id=doc_id,
            amount=to_decimal(data.get("amount")),
            direction=Direction(data.get("type")),
            subject_id=data.get("companyId") or data.get("subjectId"),
            subject_name=data.get("companyName"),
            entity_type=data.get("entityType") or "company",
            category=data.get("category"),
            date=data.get("date"),
        )
