"""
동적 엔티티 소스

학생/강사/거래처/비용 지급처 문서를 소스별 타입 레코드로 파싱하고
앵커 계정 아래 가상 계정으로 투영.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable

from adapters.models import DocumentRecord
from core.ledger.codes import derive_virtual_code
from core.ledger.models import ZERO, Account, VirtualAccount, to_decimal
from core.ledger.types import DynamicSource, SourceKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntityRecord:
    """동적 엔티티 공통 레코드

    Attributes:
        id: 엔티티 문서 ID (전표 companyId와 매칭되는 안정 키)
        name: 표시 이름
        localized_name: 현지화 이름
        opening_balance: 기초 잔액/의무액 (학생은 수강료로 대체)
    """

    id: str
    name: str
    localized_name: str
    opening_balance: Decimal = ZERO

    @property
    def match_names(self) -> tuple[str, ...]:
        """레거시 이름 매칭에 사용할 이름 목록"""
        names = [self.localized_name, self.name]
        return tuple(dict.fromkeys(n for n in names if n))


@dataclass(frozen=True)
class StudentRecord(EntityRecord):
    """수강생 (courses/{course_id}/students/{id})

    의무액은 소속 과정의 수강료.
    """

    course_id: str | None = None


@dataclass(frozen=True)
class InstructorRecord(EntityRecord):
    """강사"""

    pass


@dataclass(frozen=True)
class ClientRecord(EntityRecord):
    """거래처"""

    pass


@dataclass(frozen=True)
class ExpensePayeeRecord(EntityRecord):
    """비용 지급처 (amount 필드 = 기초 잔액)"""

    category: str | None = None


# 이름이 없는 엔티티의 표시 이름
_UNKNOWN_NAMES: dict[SourceKind, tuple[str, str]] = {
    SourceKind.STUDENT: ("Unknown Student", "طالب غير معروف"),
    SourceKind.INSTRUCTOR: ("Unknown Instructor", "أستاذ غير معروف"),
    SourceKind.CLIENT: ("Unknown Client", "عميل غير معروف"),
    SourceKind.EXPENSE: ("Unknown Payee", "جهة غير معروفة"),
}


def _resolve_names(kind: SourceKind, data: dict[str, Any]) -> tuple[str, str]:
    name = data.get("name") or data.get("studentName") or data.get("companyName")
    localized = data.get("nameAr") or name

    unknown, unknown_localized = _UNKNOWN_NAMES[kind]
    return str(name or unknown), str(localized or unknown_localized)


def _parse_student(doc: DocumentRecord) -> StudentRecord:
    name, localized = _resolve_names(SourceKind.STUDENT, doc.data)
    return StudentRecord(
        id=doc.id,
        name=name,
        localized_name=localized,
        course_id=doc.parent_id or doc.data.get("courseId"),
    )


def _parse_instructor(doc: DocumentRecord) -> InstructorRecord:
    name, localized = _resolve_names(SourceKind.INSTRUCTOR, doc.data)
    return InstructorRecord(
        id=doc.id,
        name=name,
        localized_name=localized,
        opening_balance=to_decimal(doc.data.get("openingBalance")),
    )


def _parse_client(doc: DocumentRecord) -> ClientRecord:
    name, localized = _resolve_names(SourceKind.CLIENT, doc.data)
    return ClientRecord(
        id=doc.id,
        name=name,
        localized_name=localized,
        opening_balance=to_decimal(doc.data.get("openingBalance")),
    )


def _parse_expense(doc: DocumentRecord) -> ExpensePayeeRecord:
    name, localized = _resolve_names(SourceKind.EXPENSE, doc.data)
    return ExpensePayeeRecord(
        id=doc.id,
        name=name,
        localized_name=localized,
        opening_balance=to_decimal(doc.data.get("amount")),
        category=doc.data.get("category"),
    )


_PARSERS: dict[SourceKind, Callable[[DocumentRecord], EntityRecord]] = {
    SourceKind.STUDENT: _parse_student,
    SourceKind.INSTRUCTOR: _parse_instructor,
    SourceKind.CLIENT: _parse_client,
    SourceKind.EXPENSE: _parse_expense,
}


def parse_entity(kind: SourceKind, doc: DocumentRecord) -> EntityRecord:
    """문서를 소스별 타입 레코드로 변환

    Args:
        kind: 소스 종류
        doc: 저장소 문서

    Returns:
        StudentRecord / InstructorRecord / ClientRecord / ExpensePayeeRecord
    """
    return _PARSERS[kind](doc)


def to_virtual_account(
    source: DynamicSource,
    record: EntityRecord,
    anchor: Account,
    taken_codes: set[str],
) -> VirtualAccount:
    """엔티티 레코드를 앵커 하위 가상 계정으로 투영

    코드는 앵커 내에서 유일하며 taken_codes가 갱신됨.
    유형은 앵커 계정 유형을 상속.
    """
    code = derive_virtual_code(
        anchor.code,
        source.code_prefix,
        record.id,
        taken_codes,
    )

    return VirtualAccount(
        id=record.id,
        code=code,
        name=record.name,
        kind=anchor.kind,
        parent_id=anchor.id,
        localized_name=record.localized_name,
        level=anchor.level + 1,
        currency=anchor.currency,
        source=source.name,
    )
