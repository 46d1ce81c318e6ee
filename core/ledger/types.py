"""
계정과목 타입 정의

AccountKind, Direction 등 Ledger 시스템에서 사용하는 Enum과 기본 계정과목표 정의
"""

from dataclasses import dataclass
from enum import Enum


class JournalSide(str, Enum):
    """분개 방향 (차변/대변)"""
    
    DEBIT = "DEBIT"  # 차변 (자산 증가, 비용 증가)
    CREDIT = "CREDIT"  # 대변 (부채/자본/수익 증가)


class AccountKind(str, Enum):
    """계정 유형
    
    복식부기의 5대 계정 유형.
    저장 레코드의 `type` 필드 값(소문자)과 동일.
    """
    
    ASSET = "asset"  # 자산 (현금, 학생 미수금, 거래처)
    LIABILITY = "liability"  # 부채 (공급처, 강사 미지급금)
    EQUITY = "equity"  # 자본 (이익잉여금)
    REVENUE = "revenue"  # 수익
    EXPENSE = "expense"  # 비용 (운영비)
    
    @property
    def normal_side(self) -> JournalSide:
        """정상 잔액 방향
        
        자산/비용은 차변, 부채/자본/수익은 대변.
        """
        if self in (AccountKind.ASSET, AccountKind.EXPENSE):
            return JournalSide.DEBIT
        return JournalSide.CREDIT


class Direction(str, Enum):
    """전표 방향
    
    값은 원본 전표 레코드의 `type` 필드와 동일.
    """
    
    INFLOW = "receipt"  # 입금 전표 (받은 돈)
    OUTFLOW = "payment"  # 출금 전표 (지급한 돈)


class BalanceConvention(str, Enum):
    """엔티티 잔액 부호 규칙
    
    규칙은 엔티티 종류(소스)에 붙어 다니며 전역 공식으로 고정하지 않음.
    """
    
    OBLIGATION = "obligation"  # 입금 - 의무액 (음수 = 미납)
    EXPENSE = "expense"  # 출금 - 입금 (양수 = 순지출)
    LEDGER = "ledger"  # 계정 유형의 정상 잔액 방향 기준 순액 + 기초 잔액


class SourceKind(str, Enum):
    """동적 엔티티 소스 종류"""
    
    STUDENT = "student"
    INSTRUCTOR = "instructor"
    CLIENT = "client"
    EXPENSE = "expense"


class SiblingOrder(str, Enum):
    """트리 형제 노드 정렬 방식"""
    
    LEXICAL = "lexical"  # 문자열 비교 ("10" < "2")
    NUMERIC = "numeric"  # 코드 길이 후 문자열 비교 ("2" < "10")


# 기본 계정과목표 (initialize_default_chart에서 사용)
DEFAULT_ACCOUNTS: list[tuple[str, str, str, str | None, str, int]] = [
    # (code, name, localized_name, parent_code, kind, level)
    
    # 1. 자산
    ("1", "Assets", "الموجودات", None, "asset", 0),
    ("101", "Cash and Banks", "النقدية والمصارف", "1", "asset", 1),
    ("102", "Students", "الطلبة", "1", "asset", 1),
    ("103", "Clients", "العملاء", "1", "asset", 1),
    
    # 2. 부채
    ("2", "Liabilities", "المطلوبات", None, "liability", 0),
    ("201", "Suppliers", "الموردين", "2", "liability", 1),
    ("202", "Instructors", "الأساتذة", "2", "liability", 1),
    
    # 3. 자본
    ("3", "Equity", "حقوق الملكية", None, "equity", 0),
    ("301", "Profits", "الأرباح المحتجزة", "3", "equity", 1),
    
    # 4. 수익
    ("4", "Revenue", "الإيرادات", None, "revenue", 0),
    ("401", "Misc Revenue", "إيرادات عرضية", "4", "revenue", 1),
    
    # 5. 비용
    ("5", "Expenses", "المصروفات", None, "expense", 0),
    ("501", "Operating Expenses", "المصاريف التشغيلية", "5", "expense", 1),
]


@dataclass(frozen=True)
class DynamicSource:
    """동적 엔티티 소스 설정
    
    저장소 컬렉션의 엔티티를 앵커 계정 아래 가상 계정으로 합성하기 위한 설정.
    
    Attributes:
        name: 소스 이름 (API 경로에서 사용, 예: "students")
        kind: 엔티티 종류 (레코드 파싱 방식 결정)
        collection: 컬렉션 경로 (collection_group=True면 서브컬렉션 이름)
        anchor_code: 가상 계정이 붙을 정적 계정 코드
        code_prefix: 가상 코드 접두어 (예: "S")
        convention: 잔액 부호 규칙
        collection_group: 여러 부모 아래 서브컬렉션을 한 번에 조회할지 여부
        entity_types: 이름 기반 전표 조회 시 허용되는 entityType 값
        compute_balances: 잔액 계산 여부
    """
    
    name: str
    kind: SourceKind
    collection: str
    anchor_code: str
    code_prefix: str
    convention: BalanceConvention
    collection_group: bool = False
    entity_types: tuple[str, ...] = ()
    compute_balances: bool = True


# 기본 소스 (학생/강사/거래처/비용 지급처)
DEFAULT_SOURCES: tuple[DynamicSource, ...] = (
    DynamicSource(
        name="students",
        kind=SourceKind.STUDENT,
        collection="students",
        anchor_code="102",
        code_prefix="S",
        convention=BalanceConvention.OBLIGATION,
        collection_group=True,
        entity_types=("student",),
    ),
    DynamicSource(
        name="instructors",
        kind=SourceKind.INSTRUCTOR,
        collection="instructors",
        anchor_code="202",
        code_prefix="I",
        convention=BalanceConvention.LEDGER,
        entity_types=("instructor",),
    ),
    DynamicSource(
        name="clients",
        kind=SourceKind.CLIENT,
        collection="clients",
        anchor_code="103",
        code_prefix="C",
        convention=BalanceConvention.LEDGER,
        entity_types=("client", "company"),
    ),
    DynamicSource(
        name="expenses",
        kind=SourceKind.EXPENSE,
        collection="expenses",
        anchor_code="501",
        code_prefix="E",
        convention=BalanceConvention.EXPENSE,
        entity_types=("expense", "company"),
    ),
)
