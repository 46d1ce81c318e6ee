"""
계정과목 (Chart of Accounts) Ledger 엔진

계층 계정 코드 할당, 계정 트리, 동적 엔티티 가상 계정 합성, 전표 기반 잔액 계산.

사용 예시:
```python
from core.ledger.hybrid import HybridLedgerView
from core.ledger.repository import LedgerRepository
from core.ledger.service import AccountService

repository = LedgerRepository(store)

# 계정 생성 (코드 자동 할당)
service = AccountService(repository, settings)
account = await service.create_account("Petty Cash", parent_id="101")

# 저장 계정 + 가상 계정
view = HybridLedgerView(repository, settings)
result = await view.build()
```

hybrid/service는 설정 로더(core.config.loader → core.ledger.types)에 의존하므로
순환 import를 피하기 위해 여기서 다시 내보내지 않음.
"""

from core.ledger.codes import derive_virtual_code, next_code, parse_code_suffix
from core.ledger.errors import (
    AccountInUseError,
    BackingStoreUnavailable,
    ConflictOnCommit,
    InvalidPlacementError,
    LedgerError,
    MalformedCode,
    NotFoundError,
    ReadOnlyAccountError,
)
from core.ledger.models import Account, Transaction, VirtualAccount
from core.ledger.reducer import (
    BalanceRequest,
    BalanceResult,
    TransactionReducer,
    compute_balance,
    reduce_transactions,
)
from core.ledger.types import (
    DEFAULT_ACCOUNTS,
    DEFAULT_SOURCES,
    AccountKind,
    BalanceConvention,
    Direction,
    DynamicSource,
    JournalSide,
    SiblingOrder,
    SourceKind,
)

__all__ = [
    # 모델
    "Account",
    "VirtualAccount",
    "Transaction",
    # 코드 할당
    "next_code",
    "parse_code_suffix",
    "derive_virtual_code",
    # 잔액 계산
    "TransactionReducer",
    "BalanceRequest",
    "BalanceResult",
    "compute_balance",
    "reduce_transactions",
    # Enum
    "AccountKind",
    "JournalSide",
    "Direction",
    "BalanceConvention",
    "SourceKind",
    "SiblingOrder",
    # 설정
    "DynamicSource",
    "DEFAULT_ACCOUNTS",
    "DEFAULT_SOURCES",
    # 예외
    "LedgerError",
    "NotFoundError",
    "BackingStoreUnavailable",
    "ConflictOnCommit",
    "MalformedCode",
    "InvalidPlacementError",
    "ReadOnlyAccountError",
    "AccountInUseError",
]
