"""
계정과목 API 라우트

하이브리드 계정 목록/트리 조회, 코드 제안, 계정 생성/수정/삭제, 기본 계정과목표 초기화
"""

from fastapi import APIRouter, Depends, HTTPException, Path, Query

from core.config.loader import LedgerSettings
from core.ledger import tree
from core.ledger.errors import LedgerError
from core.ledger.hybrid import HybridLedgerView
from core.ledger.service import AccountService
from core.ledger.types import SiblingOrder
from web.dependencies import get_account_service, get_hybrid_view, get_ledger_settings
from web.models.requests import AccountCreateRequest, AccountUpdateRequest
from web.models.responses import (
    AccountListResponse,
    AccountNodeResponse,
    AccountResponse,
    AccountTreeResponse,
    NextCodeResponse,
    SeedResponse,
)
from web.routes.errors import to_http_error

router = APIRouter(prefix="/api/accounts", tags=["Accounts"])


@router.get("", response_model=AccountListResponse)
async def list_accounts(
    view: HybridLedgerView = Depends(get_hybrid_view),
) -> AccountListResponse:
    """저장된 계정 + 가상 계정 목록
    
    동적 소스 일부가 실패해도 200 응답 (warnings에 사유 포함).
    """
    try:
        result = await view.build()
    except LedgerError as e:
        raise to_http_error(e)
    
    return AccountListResponse(
        accounts=[AccountResponse(**a.to_dict()) for a in result.accounts],
        warnings=result.warnings,
    )


@router.get("/tree", response_model=AccountTreeResponse)
async def get_account_tree(
    order: SiblingOrder | None = Query(default=None, description="형제 정렬 방식"),
    view: HybridLedgerView = Depends(get_hybrid_view),
    settings: LedgerSettings = Depends(get_ledger_settings),
) -> AccountTreeResponse:
    """하이브리드 계정 트리"""
    try:
        result = await view.build()
    except LedgerError as e:
        raise to_http_error(e)
    
    roots = tree.build(result.accounts, order or settings.sibling_order)
    
    return AccountTreeResponse(
        roots=[AccountNodeResponse(**node.to_dict()) for node in roots],
        warnings=result.warnings,
    )


@router.get("/next-code", response_model=NextCodeResponse)
async def suggest_next_code(
    parent_id: str | None = Query(default=None, description="부모 계정 ID (없으면 루트)"),
    service: AccountService = Depends(get_account_service),
) -> NextCodeResponse:
    """부모 아래 다음 코드 제안"""
    try:
        code = await service.suggest_code(parent_id)
    except LedgerError as e:
        raise to_http_error(e)
    
    return NextCodeResponse(parent_id=parent_id, code=code)


@router.post("", response_model=AccountResponse, status_code=201)
async def create_account(
    request: AccountCreateRequest,
    service: AccountService = Depends(get_account_service),
) -> AccountResponse:
    """계정 생성
    
    코드 충돌이 재시도 후에도 해소되지 않으면 409.
    """
    try:
        account = await service.create_account(
            name=request.name,
            parent_id=request.parent_id,
            kind=request.kind,
            localized_name=request.localized_name,
            is_leaf=request.is_leaf,
            currency=request.currency,
            code=request.code,
        )
    except (LedgerError, ValueError) as e:
        raise to_http_error(e)
    
    return AccountResponse(**account.to_dict())


@router.patch("/{account_id}", response_model=AccountResponse)
async def update_account(
    request: AccountUpdateRequest,
    account_id: str = Path(..., description="계정 ID"),
    service: AccountService = Depends(get_account_service),
) -> AccountResponse:
    """계정 수정 (name, localized_name, is_leaf, currency)"""
    patch = request.model_dump(exclude_unset=True)
    if not patch:
        raise HTTPException(
            status_code=422,
            detail="No fields to update"
        )
    
    try:
        account = await service.update_account(account_id, patch)
    except (LedgerError, ValueError) as e:
        raise to_http_error(e)
    
    return AccountResponse(**account.to_dict())


@router.delete("/{account_id}", status_code=204)
async def delete_account(
    account_id: str = Path(..., description="계정 ID"),
    service: AccountService = Depends(get_account_service),
) -> None:
    """계정 삭제
    
    하위 계정이 있거나 동적 소스의 앵커이면 409.
    """
    try:
        await service.delete_account(account_id)
    except LedgerError as e:
        raise to_http_error(e)


@router.post("/defaults", response_model=SeedResponse)
async def initialize_defaults(
    service: AccountService = Depends(get_account_service),
) -> SeedResponse:
    """계정과목표가 비어 있으면 기본 계정과목표 저장"""
    try:
        inserted = await service.initialize_default_chart()
    except LedgerError as e:
        raise to_http_error(e)
    
    return SeedResponse(inserted=inserted)
