"""
엔티티 잔액 API 라우트

GET /api/balances/{source} - 소스(학생, 강사, 거래처, 비용)별 엔티티 잔액
"""

from fastapi import APIRouter, Depends, Path

from core.ledger.errors import LedgerError
from core.ledger.hybrid import HybridLedgerView
from core.ledger.models import ZERO
from web.dependencies import get_hybrid_view
from web.models.responses import EntityBalanceResponse, SourceBalancesResponse
from web.routes.errors import to_http_error

router = APIRouter(prefix="/api/balances", tags=["Balances"])


@router.get("/{source}", response_model=SourceBalancesResponse)
async def get_source_balances(
    source: str = Path(..., description="소스 이름 (students, instructors, clients, expenses)"),
    view: HybridLedgerView = Depends(get_hybrid_view),
) -> SourceBalancesResponse:
    """소스별 엔티티 잔액
    
    전표 조회에 실패한 엔티티는 잔액 0, degraded=true.
    """
    try:
        load = await view.compute_source_balances(source)
    except LedgerError as e:
        raise to_http_error(e)
    
    entities = []
    for account in load.accounts:
        result = load.balances.get(account.id)
        entities.append(
            EntityBalanceResponse(
                entity_id=account.id,
                code=account.code,
                name=account.name,
                inflow=str(result.inflow if result else ZERO),
                outflow=str(result.outflow if result else ZERO),
                obligation=str(result.obligation if result else ZERO),
                balance=str(result.balance if result else ZERO),
                degraded=result.degraded if result else False,
            )
        )
    
    return SourceBalancesResponse(
        source=load.source.name,
        convention=load.source.convention.value,
        anchor_code=load.anchor.code,
        total=str(load.total_balance),
        entities=entities,
        warnings=load.warnings,
    )
