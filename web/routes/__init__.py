"""
API 라우트 패키지

각 기능별 라우터 모듈:
- health: 헬스 체크
- accounts: 계정과목 조회/생성/수정/삭제
- balances: 소스별 엔티티 잔액
- errors: Ledger 예외 → HTTP 상태 코드 변환
"""
