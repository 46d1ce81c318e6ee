"""
core/constants.py 테스트

모든 경로가 pathlib.Path 타입이고, 상수가 정상적으로 접근 가능한지 확인
"""

from pathlib import Path

from core.constants import PROJECT_ROOT, Collections, Defaults, Paths


class TestProjectRoot:
    """PROJECT_ROOT 테스트"""

    def test_project_root_is_path(self) -> None:
        """PROJECT_ROOT가 Path 타입인지 확인"""
        assert isinstance(PROJECT_ROOT, Path)

    def test_project_root_is_absolute(self) -> None:
        """PROJECT_ROOT가 절대 경로인지 확인"""
        assert PROJECT_ROOT.is_absolute()

    def test_project_root_contains_core_directory(self) -> None:
        """PROJECT_ROOT에 core 디렉토리가 있는지 확인"""
        assert (PROJECT_ROOT / "core").exists()


class TestCollections:
    """Collections 테스트"""

    def test_dashboard_collections(self) -> None:
        """대시보드 문서 컬렉션 이름"""
        assert Collections.CHART_OF_ACCOUNTS == "chart_of_accounts"
        assert Collections.VOUCHERS == "vouchers"
        assert Collections.COURSES == "courses"
        assert Collections.STUDENTS == "students"


class TestDefaults:
    """Defaults 테스트"""

    def test_fan_out_limits_positive(self) -> None:
        """fan-out 기본값은 양수"""
        assert Defaults.FETCH_TIMEOUT_SEC > 0
        assert Defaults.MAX_CONCURRENCY >= 1
        assert Defaults.COMMIT_RETRIES >= 1

    def test_web_defaults(self) -> None:
        """웹 서버 기본값"""
        assert isinstance(Defaults.WEB_HOST, str)
        assert isinstance(Defaults.WEB_PORT, int)


class TestPaths:
    """Paths 테스트"""

    def test_all_paths_are_path_objects(self) -> None:
        """모든 경로가 Path 타입"""
        for name in ("CONFIG_DIR", "DATA_DIR", "LOGS_DIR", "WEB_LOGS_DIR", "SETTINGS_FILE", "LEDGER_DB"):
            assert isinstance(getattr(Paths, name), Path)

    def test_paths_under_project_root(self) -> None:
        """경로가 프로젝트 루트 하위"""
        assert Paths.SETTINGS_FILE.is_relative_to(PROJECT_ROOT)
        assert Paths.LEDGER_DB.parent == Paths.DATA_DIR
