"""
계정과목/전표 모델 테스트
"""

from decimal import Decimal

import pytest

from core.ledger.models import (
    ZERO,
    Account,
    Transaction,
    VirtualAccount,
    signed_balance,
    to_decimal,
)
from core.ledger.types import AccountKind, Direction


class TestToDecimal:
    """to_decimal 테스트"""
    
    @pytest.mark.parametrize(
        "value,expected",
        [
            (5000, Decimal("5000")),
            ("12.50", Decimal("12.50")),
            (0.1, Decimal("0.1")),
            (None, ZERO),
            ("", ZERO),
            ("abc", ZERO),
            ("NaN", ZERO),
            ("Infinity", ZERO),
            (Decimal("-Infinity"), ZERO),
        ],
    )
    def test_conversion(self, value, expected) -> None:
        """숫자/문자열 변환, 비어 있거나 숫자가 아니면 0"""
        assert to_decimal(value) == expected


class TestSignedBalance:
    """정상 잔액 방향 테스트"""
    
    @pytest.mark.parametrize("kind", [AccountKind.ASSET, AccountKind.EXPENSE])
    def test_debit_normal(self, kind: AccountKind) -> None:
        """자산/비용: 차변 - 대변"""
        assert signed_balance(Decimal("100"), Decimal("30"), kind) == Decimal("70")
    
    @pytest.mark.parametrize(
        "kind", [AccountKind.LIABILITY, AccountKind.EQUITY, AccountKind.REVENUE]
    )
    def test_credit_normal(self, kind: AccountKind) -> None:
        """부채/자본/수익: 대변 - 차변"""
        assert signed_balance(Decimal("100"), Decimal("30"), kind) == Decimal("-70")


class TestAccount:
    """Account 테스트"""
    
    def test_from_record(self) -> None:
        """저장 레코드 필드명 매핑"""
        account = Account.from_record(
            "102",
            {
                "code": "102",
                "name": "Students",
                "nameAr": "الطلبة",
                "parentId": "1",
                "type": "asset",
                "level": 1,
                "isLeaf": False,
            },
        )
        
        assert account.id == "102"
        assert account.localized_name == "الطلبة"
        assert account.parent_id == "1"
        assert account.kind == AccountKind.ASSET
        assert account.level == 1
        assert not account.is_root
        assert not account.is_virtual
    
    def test_from_record_invalid_kind(self) -> None:
        """알 수 없는 계정 유형"""
        with pytest.raises(ValueError):
            Account.from_record("x", {"code": "9", "name": "X", "type": "bogus"})
    
    def test_record_roundtrip_excludes_totals(self) -> None:
        """저장 레코드에는 파생값(차변/대변/잔액) 없음"""
        account = Account(
            id="a1", code="1011", name="Petty Cash", kind=AccountKind.ASSET,
            parent_id="101", currency="IQD",
        ).with_totals(Decimal("10"), Decimal("0"))
        
        record = account.to_record()
        
        assert "balance" not in record
        assert record["parentId"] == "101"
        assert record["currency"] == "IQD"
        assert Account.from_record("a1", record).balance == ZERO
    
    def test_with_totals(self) -> None:
        """합계 적용 사본, 원본 불변"""
        account = Account(id="2", code="2", name="Liabilities", kind=AccountKind.LIABILITY)
        
        updated = account.with_totals(Decimal("400"), Decimal("1000"))
        
        assert updated.balance == Decimal("600")
        assert account.balance == ZERO
    
    def test_display_name(self) -> None:
        """현지화 이름 우선"""
        account = Account(id="1", code="1", name="Assets", kind=AccountKind.ASSET, localized_name="الموجودات")
        
        assert account.display_name == "الموجودات"


class TestVirtualAccount:
    """VirtualAccount 테스트"""
    
    def test_flags(self) -> None:
        """항상 가상 리프"""
        account = VirtualAccount(
            id="s1", code="102-SAAAAAA", name="Sara",
            kind=AccountKind.ASSET, parent_id="102", source="students",
        )
        
        assert account.is_virtual
        assert account.is_leaf
        assert account.to_dict()["source"] == "students"
    
    def test_with_totals_keeps_type(self) -> None:
        """합계 적용 후에도 VirtualAccount"""
        account = VirtualAccount(
            id="s1", code="102-SAAAAAA", name="Sara",
            kind=AccountKind.ASSET, parent_id="102", source="students",
        )
        
        updated = account.with_totals(Decimal("5000"), Decimal("3000"))
        
        assert isinstance(updated, VirtualAccount)
        assert updated.source == "students"
        assert updated.balance == Decimal("2000")


class TestTransaction:
    """Transaction 테스트"""
    
    def test_from_record(self) -> None:
        """전표 레코드 매핑"""
        transaction = Transaction.from_record(
            "v1",
            {
                "type": "receipt",
                "amount": "2500",
                "companyId": "s1",
                "companyName": "Sara",
                "entityType": "student",
                "date": "2024-03-01",
            },
        )
        
        assert transaction.direction == Direction.INFLOW
        assert transaction.amount == Decimal("2500")
        assert transaction.subject_key == "s1"
        assert transaction.entity_type == "student"
    
    def test_subject_id_alias(self) -> None:
        """subjectId도 안정 키로 사용"""
        transaction = Transaction.from_record("v1", {"type": "payment", "amount": 1, "subjectId": "i1"})
        
        assert transaction.subject_id == "i1"
        assert transaction.entity_type == "company"
    
    def test_name_only_key(self) -> None:
        """안정 키가 없으면 이름이 귀속 키"""
        transaction = Transaction.from_record("v1", {"type": "payment", "amount": 1, "companyName": "Rent"})
        
        assert transaction.subject_key == "Rent"
    
    def test_negative_amount_rejected(self) -> None:
        """금액은 0 이상"""
        with pytest.raises(ValueError):
            Transaction(id="v1", amount=Decimal("-1"), direction=Direction.OUTFLOW)
    
    def test_non_finite_amount_rejected(self) -> None:
        """NaN 금액은 ValueError (InvalidOperation 아님)"""
        with pytest.raises(ValueError):
            Transaction(id="v1", amount=Decimal("NaN"), direction=Direction.INFLOW)
    
    def test_unknown_direction_rejected(self) -> None:
        """receipt/payment 외의 type"""
        with pytest.raises(ValueError):
            Transaction.from_record("v1", {"type": "journal", "amount": 1})
    
    def test_immutable(self) -> None:
        """불변 객체"""
        transaction = Transaction(id="v1", amount=Decimal("1"), direction=Direction.INFLOW)
        
        with pytest.raises(AttributeError):
            transaction.amount = Decimal("2")  # type: ignore[misc]
