"""
Web 모델 패키지

Pydantic 스키마 정의
"""

from web.models.requests import (
    AccountCreateRequest,
    AccountUpdateRequest,
)
from web.models.responses import (
    AccountListResponse,
    AccountNodeResponse,
    AccountResponse,
    AccountTreeResponse,
    EntityBalanceResponse,
    HealthResponse,
    NextCodeResponse,
    SeedResponse,
    SourceBalancesResponse,
)

__all__ = [
    # Requests
    "AccountCreateRequest",
    "AccountUpdateRequest",
    # Responses
    "AccountResponse",
    "AccountListResponse",
    "AccountNodeResponse",
    "AccountTreeResponse",
    "NextCodeResponse",
    "SeedResponse",
    "EntityBalanceResponse",
    "SourceBalancesResponse",
    "HealthResponse",
]
