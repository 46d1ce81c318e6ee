"""
계정 코드 할당

계층 코드 규칙:
- 루트: 단일 숫자 세그먼트 ("1", "2", ...)
- 하위: 부모 코드 + 양의 정수 접미사 ("10" → "101", "102", ...)
  기본 계정과목표처럼 0으로 채운 접미사("1" → "101")도 허용, 값이 0인 접미사는 불가
- 가상 계정: 앵커 코드 + "-" + 접두사 + base36 해시 ("102-S3K9XQ2")

가상 계정 코드는 숫자 접미사가 아니므로 코드 할당에 영향을 주지 않음.
"""

import hashlib
import logging
import re
from typing import Iterable

from core.constants import Defaults
from core.ledger.errors import MalformedCode, ReadOnlyAccountError
from core.ledger.models import Account

logger = logging.getLogger(__name__)


# 선행 0 없는 양의 정수 (루트)
_NUMERIC_SEGMENT = re.compile(r"[1-9][0-9]*")

# 양의 정수, 0 채움 허용 (하위 접미사)
_SUFFIX = re.compile(r"0*[1-9][0-9]*")

_BASE36_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def parse_root_code(code: str) -> int:
    """루트 코드를 정수로 파싱
    
    Raises:
        MalformedCode: 단일 숫자 세그먼트가 아닌 경우
    """
    if not _NUMERIC_SEGMENT.fullmatch(code or ""):
        raise MalformedCode(code)
    return int(code)


def parse_code_suffix(code: str, parent_code: str) -> int:
    """부모 코드 이후의 접미사를 정수로 파싱
    
    Args:
        code: 하위 계정 코드
        parent_code: 부모 계정 코드
        
    Returns:
        접미사 정수
        
    Raises:
        MalformedCode: 부모 코드로 시작하지 않거나 접미사가 양의 정수가 아닌 경우
        
    Example:
        >>> parse_code_suffix("1013", "101")
        3
    """
    if not code or not code.startswith(parent_code):
        raise MalformedCode(code, parent_code)
    
    suffix = code[len(parent_code):]
    if not _SUFFIX.fullmatch(suffix):
        raise MalformedCode(code, parent_code)
    
    return int(suffix)


def next_code(existing_accounts: Iterable[Account], parent: Account | None) -> str:
    """새 계정의 다음 코드 계산 (순수 함수)
    
    - 루트: 기존 루트 코드의 최댓값 + 1 (없으면 "1")
    - 하위: 부모 코드 + (형제 접미사 최댓값 + 1) (형제가 없으면 부모 코드 + "1")
    
    형식이 잘못된 코드는 0이 아닌 "없음"으로 취급하여 건너뜀.
    전역 유일성은 호출자가 커밋 직전에 다시 확인해야 함.
    
    Args:
        existing_accounts: 현재 계정 목록 (최소한 같은 부모의 형제 포함)
        parent: 부모 계정 (루트 생성 시 None)
        
    Returns:
        다음 코드 문자열
        
    Raises:
        ReadOnlyAccountError: 부모가 가상 계정인 경우
    """
    if parent is None:
        roots = [a for a in existing_accounts if a.parent_id is None and not a.is_virtual]
        if not roots:
            return "1"
        
        max_root = 0
        for account in roots:
            try:
                max_root = max(max_root, parse_root_code(account.code))
            except MalformedCode:
                logger.debug(f"형식 오류 루트 코드 건너뜀: {account.code}")
        return str(max_root + 1)
    
    if parent.is_virtual:
        raise ReadOnlyAccountError(parent.id)
    
    siblings = [a for a in existing_accounts if a.parent_id == parent.id]
    if not siblings:
        return parent.code + "1"
    
    max_suffix = 0
    for sibling in siblings:
        try:
            max_suffix = max(max_suffix, parse_code_suffix(sibling.code, parent.code))
        except MalformedCode:
            logger.debug(
                "형식 오류 하위 코드 건너뜀",
                extra={"code": sibling.code, "parent_code": parent.code},
            )
    return parent.code + str(max_suffix + 1)


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def derive_virtual_code(
    anchor_code: str,
    prefix: str,
    entity_id: str,
    taken: set[str],
    width: int = Defaults.VIRTUAL_CODE_WIDTH,
) -> str:
    """가상 계정 코드 생성
    
    sha1(prefix:entity_id)를 base36 고정 폭으로 매핑.
    같은 앵커 하위에서 충돌하면 결정적으로 "-2", "-3" ... 접미사 부여.
    반환된 코드는 taken에 추가됨.
    
    Args:
        anchor_code: 앵커 계정 코드
        prefix: 소스별 접두 문자 (S, I, C, E)
        entity_id: 엔티티 문서 ID
        taken: 이미 사용된 코드 집합 (갱신됨)
        width: 해시 길이
        
    Returns:
        유일한 가상 계정 코드
    """
    digest = hashlib.sha1(f"{prefix}:{entity_id}".encode("utf-8")).hexdigest()
    tag = _to_base36(int(digest, 16)).rjust(width, "0")[:width]
    
    base = f"{anchor_code}-{prefix}{tag}"
    candidate = base
    counter = 2
    while candidate in taken:
        candidate = f"{base}-{counter}"
        counter += 1
    
    if candidate != base:
        logger.info(
            "가상 계정 코드 충돌, 접미사 부여",
            extra={"entity_id": entity_id, "code": candidate},
        )
    
    taken.add(candidate)
    return candidate
