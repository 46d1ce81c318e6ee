"""
Ledger 예외 → HTTP 응답 변환

- NotFoundError → 404
- ConflictOnCommit, AccountInUseError → 409
- 검증 실패 (ValueError, ReadOnlyAccountError) → 422
- BackingStoreUnavailable → 503
"""

import logging

from fastapi import HTTPException

from core.ledger.errors import (
    AccountInUseError,
    BackingStoreUnavailable,
    ConflictOnCommit,
    NotFoundError,
    ReadOnlyAccountError,
)

logger = logging.getLogger(__name__)


def to_http_error(error: Exception) -> HTTPException:
    """Ledger/검증 예외를 HTTPException으로 변환"""
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    
    if isinstance(error, (ConflictOnCommit, AccountInUseError)):
        return HTTPException(status_code=409, detail=str(error))
    
    if isinstance(error, BackingStoreUnavailable):
        logger.error("저장소 사용 불가", extra={"operation": error.operation})
        return HTTPException(status_code=503, detail=str(error))
    
    if isinstance(error, (ReadOnlyAccountError, ValueError)):
        return HTTPException(status_code=422, detail=str(error))
    
    logger.error(
        "처리되지 않은 Ledger 오류",
        extra={"error_type": type(error).__name__, "error": str(error)},
    )
    return HTTPException(status_code=500, detail=str(error))
