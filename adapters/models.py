"""
문서 저장소 공통 데이터 모델

저장소 구현체(SQLite, 메모리)가 공유하는 레코드/필터/정렬 모델과 예외.
"""

import operator
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable


class DocumentStoreError(Exception):
    """문서 저장소 에러
    
    연결 실패, 드라이버 에러 등 모든 저장소 실패.
    """
    
    def __init__(self, operation: str, message: str):
        self.operation = operation
        self.message = message
        super().__init__(f"Document store error [{operation}]: {message}")


class DocumentConflictError(DocumentStoreError):
    """유일 제약 위반
    
    유일 필드(예: chart_of_accounts.code)가 이미 존재할 때 발생.
    """
    
    def __init__(self, collection: str, field_name: str, value: Any):
        self.collection = collection
        self.field_name = field_name
        self.value = value
        super().__init__(
            "write",
            f"unique constraint violated: {collection}.{field_name} = {value!r}",
        )


class DocumentNotFoundError(DocumentStoreError):
    """수정 대상 문서 없음"""
    
    def __init__(self, path: str):
        self.path = path
        super().__init__("update", f"document not found: {path}")


@dataclass(frozen=True)
class DocumentRecord:
    """저장된 문서
    
    Attributes:
        path: 전체 경로 (예: courses/c1/students/s1)
        id: 문서 ID (경로의 마지막 세그먼트)
        data: 문서 필드
    """
    
    path: str
    id: str
    data: dict[str, Any] = field(default_factory=dict)
    
    @property
    def collection(self) -> str:
        """소속 컬렉션 경로"""
        return self.path.rsplit("/", 1)[0]
    
    @property
    def parent_id(self) -> str | None:
        """서브컬렉션 문서의 부모 문서 ID
        
        Example:
            courses/c1/students/s1 → "c1"
        """
        parts = self.path.split("/")
        if len(parts) >= 4:
            return parts[-3]
        return None


_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "in": lambda value, options: value in options,
}


@dataclass(frozen=True)
class Filter:
    """필드 필터 조건"""
    
    field: str
    op: str
    value: Any
    
    def __post_init__(self) -> None:
        if self.op not in _OPERATORS:
            raise ValueError(f"Unsupported filter operator: {self.op}")
    
    def matches(self, data: dict[str, Any]) -> bool:
        """문서가 조건을 만족하는지 확인
        
        필드가 없는 문서는 != 외에는 만족하지 않음.
        """
        if self.field not in data:
            return self.op == "!="
        try:
            return _OPERATORS[self.op](data[self.field], self.value)
        except TypeError:
            return False


@dataclass(frozen=True)
class Ordering:
    """정렬 조건"""
    
    field: str
    descending: bool = False


def apply_query(
    records: Iterable[DocumentRecord],
    filters: Iterable[Filter] = (),
    order_by: Iterable[Ordering] = (),
) -> list[DocumentRecord]:
    """필터와 정렬을 레코드 목록에 적용
    
    정렬은 마지막 조건부터 안정 정렬로 적용. 값이 없는 문서는 뒤로.
    """
    filters = list(filters)
    result = [r for r in records if all(f.matches(r.data) for f in filters)]
    
    for ordering in reversed(list(order_by)):
        present = [r for r in result if r.data.get(ordering.field) is not None]
        missing = [r for r in result if r.data.get(ordering.field) is None]
        present.sort(key=lambda r: r.data[ordering.field], reverse=ordering.descending)
        result = present + missing
    
    return result
