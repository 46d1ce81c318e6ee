"""
하드코딩 상수 - 변경될 일이 거의 없는 고정값

중요: 경로는 반드시 pathlib.Path 사용 (Windows/Linux 크로스 플랫폼)
"""

from pathlib import Path


# 프로젝트 루트 (이 파일 기준 2단계 상위: core/constants.py → 프로젝트 루트)
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent


class Collections:
    """문서 저장소 컬렉션 경로"""

    CHART_OF_ACCOUNTS: str = "chart_of_accounts"
    VOUCHERS: str = "vouchers"
    COURSES: str = "courses"
    STUDENTS: str = "students"  # courses/{course_id}/students 서브컬렉션
    INSTRUCTORS: str = "instructors"
    CLIENTS: str = "clients"
    EXPENSES: str = "expenses"


class Defaults:
    """기본값 상수"""

    WEB_HOST: str = "127.0.0.1"
    WEB_PORT: int = 8000

    LOG_LEVEL: str = "INFO"

    # 잔액 계산 fan-out
    FETCH_TIMEOUT_SEC: float = 5.0
    MAX_CONCURRENCY: int = 8

    # 코드 충돌 시 재할당 횟수
    COMMIT_RETRIES: int = 3

    # 가상 계정 코드 해시 길이 (base36)
    VIRTUAL_CODE_WIDTH: int = 6


class Paths:
    """프로젝트 경로 상수 (pathlib 사용 - OS 독립적)"""

    # 디렉토리
    CONFIG_DIR: Path = PROJECT_ROOT / "config"
    DATA_DIR: Path = PROJECT_ROOT / "data"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"
    WEB_LOGS_DIR: Path = LOGS_DIR / "web"

    # 설정 파일
    SETTINGS_FILE: Path = CONFIG_DIR / "settings.yaml"

    # DB 파일
    LEDGER_DB: Path = DATA_DIR / "ledger.db"
