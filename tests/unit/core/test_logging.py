"""
core/logging.py 테스트
"""

import logging
from pathlib import Path

import pytest

from core import logging as core_logging
from core.constants import Paths


@pytest.fixture
def log_dirs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """로그 디렉토리를 임시 경로로 교체"""
    monkeypatch.setattr(Paths, "LOGS_DIR", tmp_path)
    monkeypatch.setattr(Paths, "WEB_LOGS_DIR", tmp_path / "web")
    return tmp_path


@pytest.fixture
def restore_root_logger():
    """setup_logging이 교체한 루트 핸들러 복원"""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestLogFilePath:
    """get_log_file_path 테스트"""
    
    def test_web_process(self, log_dirs: Path) -> None:
        """web 프로세스는 logs/web 하위"""
        assert core_logging.get_log_file_path("web") == log_dirs / "web" / "web.log"
    
    def test_script_process(self, log_dirs: Path) -> None:
        """그 외 프로세스는 logs 하위"""
        assert core_logging.get_log_file_path("check_ledger") == log_dirs / "check_ledger.log"


class TestSetupLogging:
    """setup_logging 테스트"""
    
    def test_handlers(self, log_dirs: Path, restore_root_logger) -> None:
        """콘솔 + 일별 파일 핸들러, 시끄러운 로거 WARNING"""
        root = core_logging.setup_logging("web", console_level=logging.DEBUG)
        
        assert len(root.handlers) == 2
        assert root.handlers[0].level == logging.DEBUG
        assert (log_dirs / "web" / "web.log").exists()
        assert logging.getLogger("aiosqlite").level == logging.WARNING
