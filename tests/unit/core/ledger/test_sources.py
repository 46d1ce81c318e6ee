"""
동적 엔티티 소스 테스트
"""

from decimal import Decimal

import pytest

from adapters.models import DocumentRecord
from core.ledger.models import Account, VirtualAccount
from core.ledger.sources import (
    ClientRecord,
    ExpensePayeeRecord,
    InstructorRecord,
    StudentRecord,
    parse_entity,
    to_virtual_account,
)
from core.ledger.types import DEFAULT_SOURCES, AccountKind, SourceKind


def _doc(path: str, **data) -> DocumentRecord:
    return DocumentRecord(path=path, id=path.rsplit("/", 1)[-1], data=data)


class TestParseEntity:
    """parse_entity 테스트"""
    
    def test_student_course_from_path(self) -> None:
        """학생 과정 ID는 서브컬렉션 부모 문서"""
        record = parse_entity(SourceKind.STUDENT, _doc("courses/c1/students/s1", name="Sara"))
        
        assert isinstance(record, StudentRecord)
        assert record.id == "s1"
        assert record.course_id == "c1"
        assert record.name == "Sara"
        assert record.localized_name == "Sara"
    
    def test_student_course_field(self) -> None:
        """최상위 컬렉션 학생은 courseId 필드 사용"""
        record = parse_entity(SourceKind.STUDENT, _doc("students/s9", studentName="Omar", courseId="c2"))
        
        assert record.course_id == "c2"
        assert record.name == "Omar"
    
    def test_instructor_opening_balance(self) -> None:
        """강사 기초 잔액"""
        record = parse_entity(
            SourceKind.INSTRUCTOR,
            _doc("instructors/i1", name="Ali", nameAr="علي", openingBalance="1000"),
        )
        
        assert isinstance(record, InstructorRecord)
        assert record.opening_balance == Decimal("1000")
        assert record.localized_name == "علي"
    
    def test_client_company_name(self) -> None:
        """거래처 이름은 companyName도 허용"""
        record = parse_entity(SourceKind.CLIENT, _doc("clients/k1", companyName="Acme"))
        
        assert isinstance(record, ClientRecord)
        assert record.name == "Acme"
        assert record.opening_balance == Decimal("0")
    
    def test_expense_amount_is_opening(self) -> None:
        """비용 지급처 amount = 기초 잔액"""
        record = parse_entity(
            SourceKind.EXPENSE,
            _doc("expenses/e1", name="Rent", amount=250, category="office"),
        )
        
        assert isinstance(record, ExpensePayeeRecord)
        assert record.opening_balance == Decimal("250")
        assert record.category == "office"
    
    @pytest.mark.parametrize(
        "kind,expected",
        [
            (SourceKind.STUDENT, "Unknown Student"),
            (SourceKind.INSTRUCTOR, "Unknown Instructor"),
            (SourceKind.CLIENT, "Unknown Client"),
            (SourceKind.EXPENSE, "Unknown Payee"),
        ],
    )
    def test_missing_name(self, kind: SourceKind, expected: str) -> None:
        """이름이 없으면 기본 표시 이름"""
        record = parse_entity(kind, _doc("x/1"))
        
        assert record.name == expected
        assert record.localized_name
    
    def test_match_names_deduplicated(self) -> None:
        """매칭 이름: 현지화 이름 → 이름, 중복 제거"""
        record = parse_entity(SourceKind.CLIENT, _doc("clients/k1", name="Acme"))
        
        assert record.match_names == ("Acme",)


class TestToVirtualAccount:
    """to_virtual_account 테스트"""
    
    @pytest.fixture
    def anchor(self) -> Account:
        return Account(
            id="102", code="102", name="Students", kind=AccountKind.ASSET,
            parent_id="1", level=1, currency="IQD",
        )
    
    def test_projection(self, anchor: Account) -> None:
        """앵커 하위 가상 리프, 유형/통화 상속"""
        source = DEFAULT_SOURCES[0]
        record = StudentRecord(id="s1", name="Sara", localized_name="سارة", course_id="c1")
        taken: set[str] = set()
        
        account = to_virtual_account(source, record, anchor, taken)
        
        assert isinstance(account, VirtualAccount)
        assert account.id == "s1"
        assert account.parent_id == "102"
        assert account.code.startswith("102-S")
        assert account.kind == AccountKind.ASSET
        assert account.level == 2
        assert account.currency == "IQD"
        assert account.source == "students"
        assert account.is_leaf
        assert account.code in taken
    
    def test_deterministic(self, anchor: Account) -> None:
        """같은 엔티티는 항상 같은 코드"""
        source = DEFAULT_SOURCES[0]
        record = StudentRecord(id="s1", name="Sara", localized_name="Sara")
        
        first = to_virtual_account(source, record, anchor, set())
        second = to_virtual_account(source, record, anchor, set())
        
        assert first.code == second.code
    
    def test_collision_suffix(self, anchor: Account) -> None:
        """이미 사용된 코드면 접미사 부여"""
        source = DEFAULT_SOURCES[0]
        record = StudentRecord(id="s1", name="Sara", localized_name="Sara")
        taken: set[str] = set()
        
        first = to_virtual_account(source, record, anchor, taken)
        second = to_virtual_account(source, record, anchor, taken)
        
        assert second.code == f"{first.code}-2"
