"""
테스트 헬퍼

계정 생성, 기본 계정과목표 저장 등 여러 테스트 모듈에서 쓰는 함수.
"""

from adapters.mock.document_store import InMemoryDocumentStore
from core.constants import Collections
from core.ledger.models import Account
from core.ledger.types import DEFAULT_ACCOUNTS, AccountKind


def make_account(
    code: str,
    parent: Account | None = None,
    kind: AccountKind | None = None,
    account_id: str | None = None,
    **kwargs,
) -> Account:
    """테스트용 계정 생성 (ID 기본값 = 코드)"""
    return Account(
        id=account_id or code,
        code=code,
        name=kwargs.pop("name", f"Account {code}"),
        kind=kind or (parent.kind if parent else AccountKind.ASSET),
        parent_id=kwargs.pop("parent_id", parent.id if parent else None),
        level=parent.level + 1 if parent else 0,
        **kwargs,
    )


def seed_default_chart(store: InMemoryDocumentStore) -> None:
    """기본 계정과목표를 저장소에 직접 저장 (문서 ID = 코드)"""
    for code, name, localized_name, parent_code, kind, level in DEFAULT_ACCOUNTS:
        store.seed(
            Collections.CHART_OF_ACCOUNTS,
            code,
            {
                "code": code,
                "name": name,
                "nameAr": localized_name,
                "parentId": parent_code,
                "type": kind,
                "level": level,
                "isLeaf": False,
            },
        )
