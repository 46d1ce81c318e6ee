"""
Ledger 예외 정의

읽기 경로는 부분 결과로 저하(degrade)하고, 쓰기 경로는 아래 예외를 호출자에게 전파.
"""


class LedgerError(Exception):
    """Ledger 에러 베이스"""
    pass


class NotFoundError(LedgerError):
    """참조한 계정/엔티티가 존재하지 않음
    
    읽기 경로(고아 노드, 앵커 누락)에서는 경고로 처리하고,
    쓰기 경로(부모 지정, 수정/삭제 대상)에서만 발생.
    """
    
    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} not found: {key}")


class BackingStoreUnavailable(LedgerError):
    """문서 저장소 읽기/쓰기 실패"""
    
    def __init__(self, operation: str, message: str):
        self.operation = operation
        self.message = message
        super().__init__(f"Backing store unavailable during {operation}: {message}")


class ConflictOnCommit(LedgerError):
    """계정 코드 유일성 위반
    
    일반 저장소 실패와 구분되어야 호출자가 코드 재할당 후 재시도 가능.
    """
    
    def __init__(self, code: str, attempts: int = 1):
        self.code = code
        self.attempts = attempts
        super().__init__(f"Account code '{code}' already exists (attempts: {attempts})")


class MalformedCode(LedgerError, ValueError):
    """숫자 접미사 규칙을 따르지 않는 저장된 코드
    
    next_code 계산 시 건너뛰며 절대 전파하지 않음.
    """
    
    def __init__(self, code: str, parent_code: str | None = None):
        self.code = code
        self.parent_code = parent_code
        super().__init__(f"Malformed account code '{code}' (parent code: {parent_code})")


class InvalidPlacementError(LedgerError, ValueError):
    """코드가 부모/조상 코드 체인과 맞지 않음"""
    pass


class ReadOnlyAccountError(LedgerError):
    """가상 계정에 대한 쓰기 시도 (하위 계정 생성, 수정, 삭제)"""
    
    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(f"Virtual account is read-only: {account_id}")


class AccountInUseError(LedgerError):
    """하위 계정이 있거나 동적 소스의 앵커인 계정에 대한 삭제/변경 시도"""
    
    def __init__(self, account_id: str, reason: str):
        self.account_id = account_id
        self.reason = reason
        super().__init__(f"Account {account_id} is in use: {reason}")
