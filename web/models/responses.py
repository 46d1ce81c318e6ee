"""
응답 스키마 (Pydantic)

Web API 응답 데이터 직렬화
"""

from datetime import datetime

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """헬스 체크 응답"""
    
    status: str = Field(default="ok", description="서비스 상태")
    version: str = Field(..., description="API 버전")
    timestamp: datetime = Field(..., description="응답 시간 (UTC)")


class AccountResponse(BaseModel):
    """계정 응답
    
    금액은 Decimal 정밀도 유지를 위해 문자열.
    """
    
    id: str = Field(..., description="계정 ID")
    code: str = Field(..., description="계정 코드")
    name: str = Field(..., description="계정 이름")
    localized_name: str = Field(default="", description="현지화 이름")
    parent_id: str | None = Field(default=None, description="부모 계정 ID")
    kind: str = Field(..., description="계정 유형")
    is_leaf: bool = Field(..., description="리프 여부")
    level: int = Field(..., description="트리 깊이 (루트 = 0)")
    currency: str | None = Field(default=None, description="표시용 통화 태그")
    debit_total: str = Field(default="0", description="차변 합계")
    credit_total: str = Field(default="0", description="대변 합계")
    balance: str = Field(default="0", description="잔액")
    is_virtual: bool = Field(default=False, description="가상 계정 여부")
    source: str | None = Field(default=None, description="가상 계정 소스")


class AccountListResponse(BaseModel):
    """하이브리드 계정 목록 응답"""
    
    accounts: list[AccountResponse] = Field(..., description="계정 목록")
    warnings: list[str] = Field(default_factory=list, description="부분 실패 경고")


class AccountNodeResponse(AccountResponse):
    """계정 트리 노드 응답"""
    
    children: list["AccountNodeResponse"] = Field(default_factory=list, description="하위 노드")


AccountNodeResponse.model_rebuild()


class AccountTreeResponse(BaseModel):
    """계정 트리 응답"""
    
    roots: list[AccountNodeResponse] = Field(..., description="루트 노드 목록")
    warnings: list[str] = Field(default_factory=list, description="부분 실패 경고")


class NextCodeResponse(BaseModel):
    """다음 코드 제안 응답"""
    
    parent_id: str | None = Field(default=None, description="부모 계정 ID")
    code: str = Field(..., description="제안 코드 (확정 아님)")


class SeedResponse(BaseModel):
    """기본 계정과목표 초기화 응답"""
    
    inserted: int = Field(..., description="새로 저장한 계정 수")


class EntityBalanceResponse(BaseModel):
    """엔티티 잔액 응답"""
    
    entity_id: str = Field(..., description="엔티티 ID")
    code: str = Field(..., description="가상 계정 코드")
    name: str = Field(..., description="엔티티 이름")
    inflow: str = Field(..., description="입금 합계")
    outflow: str = Field(..., description="출금 합계")
    obligation: str = Field(..., description="의무액 / 기초 잔액")
    balance: str = Field(..., description="잔액 (소스 부호 규칙)")
    degraded: bool = Field(default=False, description="전표 조회 실패 여부")


class SourceBalancesResponse(BaseModel):
    """소스별 엔티티 잔액 응답"""
    
    source: str = Field(..., description="소스 이름")
    convention: str = Field(..., description="잔액 부호 규칙")
    anchor_code: str = Field(..., description="앵커 계정 코드")
    total: str = Field(..., description="잔액 합계")
    entities: list[EntityBalanceResponse] = Field(..., description="엔티티별 잔액")
    warnings: list[str] = Field(default_factory=list, description="부분 실패 경고")
