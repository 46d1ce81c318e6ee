"""
요청 스키마 (Pydantic)

Web API 요청 데이터 검증
"""

from pydantic import BaseModel, ConfigDict, Field

from core.ledger.types import AccountKind


class AccountCreateRequest(BaseModel):
    """계정 생성 요청

    code를 생략하면 부모 아래 다음 코드가 자동 할당됨.
    """
    
    name: str = Field(..., min_length=1, description="계정 이름")
    parent_id: str | None = Field(default=None, description="부모 계정 ID (없으면 루트)")
    kind: AccountKind | None = Field(
        default=None,
        description="계정 유형 (하위 계정은 부모 유형 상속, 루트는 필수)",
    )
    localized_name: str = Field(default="", description="현지화 이름")
    is_leaf: bool = Field(default=False, description="리프 여부")
    currency: str | None = Field(default=None, description="표시용 통화 태그")
    code: str | None = Field(default=None, description="직접 지정할 코드")
    
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Petty Cash",
                    "localized_name": "صندوق النثرية",
                    "parent_id": "101",
                },
                {
                    "name": "Fixed Assets",
                    "kind": "asset",
                },
            ]
        }
    }


class AccountUpdateRequest(BaseModel):
    """계정 수정 요청

    코드, 유형, 부모는 변경 불가 (알 수 없는 필드는 422).
    """
    
    model_config = ConfigDict(extra="forbid")
    
    name: str | None = Field(default=None, min_length=1, description="계정 이름")
    localized_name: str | None = Field(default=None, description="현지화 이름")
    is_leaf: bool | None = Field(default=None, description="리프 여부")
    currency: str | None = Field(default=None, description="표시용 통화 태그")
