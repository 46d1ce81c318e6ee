"""
설정 로더

settings.yaml 로드 및 Ledger 설정 생성
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from core.constants import Defaults, Paths
from core.ledger.types import (
    DEFAULT_SOURCES,
    BalanceConvention,
    DynamicSource,
    SiblingOrder,
    SourceKind,
)


@dataclass(frozen=True)
class WebConfig:
    """Web 서버 설정"""

    host: str = Defaults.WEB_HOST
    port: int = Defaults.WEB_PORT


@dataclass(frozen=True)
class LedgerSettings:
    """Ledger 설정 (settings.yaml에서 로드)

    불변 데이터 구조로 설정 변경 방지
    """

    db_path: Path = Paths.LEDGER_DB
    log_level: str = Defaults.LOG_LEVEL
    fetch_timeout_sec: float = Defaults.FETCH_TIMEOUT_SEC
    max_concurrency: int = Defaults.MAX_CONCURRENCY
    commit_retries: int = Defaults.COMMIT_RETRIES
    name_match_fallback: bool = True
    sibling_order: SiblingOrder = SiblingOrder.LEXICAL
    roll_up: bool = True
    sources: tuple[DynamicSource, ...] = DEFAULT_SOURCES
    web: WebConfig = field(default_factory=WebConfig)

    def get_source(self, name: str) -> DynamicSource | None:
        """이름으로 소스 설정 조회"""
        for source in self.sources:
            if source.name == name:
                return source
        return None


_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class SettingsLoadError(Exception):
    """Settings 로드 실패 예외"""

    pass


def load_settings(path: Path | None = None) -> LedgerSettings:
    """settings.yaml 파일 로드

    기본 경로의 파일이 없으면 내장 기본값 사용.
    명시한 경로의 파일이 없으면 예외.

    Args:
        path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        LedgerSettings 인스턴스

    Raises:
        SettingsLoadError: 파일이 없거나 형식이 잘못된 경우
    """
    explicit = path is not None
    if path is None:
        path = Paths.SETTINGS_FILE

    if not path.exists():
        if explicit:
            raise SettingsLoadError(f"settings.yaml 파일을 찾을 수 없습니다: {path}")
        return LedgerSettings()

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise SettingsLoadError(f"settings.yaml 파싱 실패: {e}") from e

    if data is None:
        return LedgerSettings()

    if not isinstance(data, dict):
        raise SettingsLoadError("settings.yaml 최상위는 매핑이어야 합니다")

    return parse_settings(data)


def parse_settings(data: dict[str, Any]) -> LedgerSettings:
    """설정 매핑을 LedgerSettings로 변환

    Raises:
        SettingsLoadError: 값이 유효하지 않은 경우
    """
    ledger = data.get("ledger") or {}
    web = data.get("web") or {}

    if not isinstance(ledger, dict) or not isinstance(web, dict):
        raise SettingsLoadError("'ledger'와 'web' 섹션은 매핑이어야 합니다")

    try:
        sibling_order = SiblingOrder(ledger.get("sibling_order", SiblingOrder.LEXICAL.value))
    except ValueError as e:
        valid = [o.value for o in SiblingOrder]
        raise SettingsLoadError(
            f"유효하지 않은 sibling_order입니다: '{ledger.get('sibling_order')}'. "
            f"유효한 값: {valid}"
        ) from e

    max_concurrency = _positive_int(ledger, "max_concurrency", Defaults.MAX_CONCURRENCY)
    commit_retries = _positive_int(ledger, "commit_retries", Defaults.COMMIT_RETRIES)

    fetch_timeout_sec = ledger.get("fetch_timeout_sec", Defaults.FETCH_TIMEOUT_SEC)
    if not isinstance(fetch_timeout_sec, (int, float)) or fetch_timeout_sec <= 0:
        raise SettingsLoadError(
            f"fetch_timeout_sec는 양수여야 합니다: {fetch_timeout_sec!r}"
        )

    raw_sources = data.get("sources")
    if raw_sources is None:
        sources = DEFAULT_SOURCES
    else:
        if not isinstance(raw_sources, list):
            raise SettingsLoadError("'sources'는 목록이어야 합니다")
        sources = tuple(_parse_source(item) for item in raw_sources)

        names = [s.name for s in sources]
        if len(names) != len(set(names)):
            raise SettingsLoadError(f"소스 이름이 중복되었습니다: {names}")

    log_level = str(ledger.get("log_level", Defaults.LOG_LEVEL)).upper()
    if log_level not in _LOG_LEVELS:
        raise SettingsLoadError(
            f"유효하지 않은 log_level입니다: '{log_level}'. 유효한 값: {list(_LOG_LEVELS)}"
        )

    db_path = ledger.get("db_path")

    return LedgerSettings(
        db_path=Path(db_path) if db_path else Paths.LEDGER_DB,
        log_level=log_level,
        fetch_timeout_sec=float(fetch_timeout_sec),
        max_concurrency=max_concurrency,
        commit_retries=commit_retries,
        name_match_fallback=bool(ledger.get("name_match_fallback", True)),
        sibling_order=sibling_order,
        roll_up=bool(ledger.get("roll_up", True)),
        sources=sources,
        web=WebConfig(
            host=str(web.get("host", Defaults.WEB_HOST)),
            port=_positive_int(web, "port", Defaults.WEB_PORT),
        ),
    )


def _positive_int(section: dict[str, Any], key: str, default: int) -> int:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise SettingsLoadError(f"{key}는 1 이상의 정수여야 합니다: {value!r}")
    return value


def _parse_source(item: Any) -> DynamicSource:
    """sources 항목 하나를 DynamicSource로 변환"""
    if not isinstance(item, dict):
        raise SettingsLoadError(f"sources 항목은 매핑이어야 합니다: {item!r}")

    for key in ("name", "kind", "anchor_code", "code_prefix"):
        if not item.get(key):
            raise SettingsLoadError(f"sources 항목에 '{key}' 필드가 없습니다: {item!r}")

    try:
        kind = SourceKind(item["kind"])
    except ValueError as e:
        valid = [k.value for k in SourceKind]
        raise SettingsLoadError(
            f"유효하지 않은 kind입니다: '{item['kind']}'. 유효한 값: {valid}"
        ) from e

    defaults = next((s for s in DEFAULT_SOURCES if s.kind == kind), None)

    convention_value = item.get("convention")
    if convention_value is None and defaults is not None:
        convention = defaults.convention
    else:
        try:
            convention = BalanceConvention(convention_value)
        except ValueError as e:
            valid = [c.value for c in BalanceConvention]
            raise SettingsLoadError(
                f"유효하지 않은 convention입니다: '{convention_value}'. 유효한 값: {valid}"
            ) from e

    entity_types = item.get("entity_types")
    if entity_types is None:
        entity_types = defaults.entity_types if defaults else ()

    return DynamicSource(
        name=str(item["name"]),
        kind=kind,
        collection=str(item.get("collection") or (defaults.collection if defaults else item["name"])),
        anchor_code=str(item["anchor_code"]),
        code_prefix=str(item["code_prefix"]),
        convention=convention,
        collection_group=bool(
            item.get("collection_group", defaults.collection_group if defaults else False)
        ),
        entity_types=tuple(str(t) for t in entity_types),
        compute_balances=bool(item.get("compute_balances", True)),
    )


class Settings:
    """애플리케이션 설정 (싱글턴 패턴)

    settings.yaml을 로드하고 관련 설정을 제공
    """

    _instance: "Settings | None" = None
    _ledger: LedgerSettings | None = None

    def __new__(cls, settings_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, settings_path: Path | None = None) -> None:
        if self._ledger is None:
            self._ledger = load_settings(settings_path)

    @property
    def ledger(self) -> LedgerSettings:
        """Ledger 설정"""
        assert self._ledger is not None
        return self._ledger

    @property
    def db_path(self) -> Path:
        """DB 경로"""
        return self.ledger.db_path

    @property
    def web(self) -> WebConfig:
        """Web 서버 설정"""
        return self.ledger.web

    @classmethod
    def reset(cls) -> None:
        """싱글턴 인스턴스 초기화 (테스트용)"""
        cls._instance = None
        cls._ledger = None


def get_settings(settings_path: Path | None = None) -> Settings:
    """Settings 인스턴스 반환

    Args:
        settings_path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        Settings 싱글턴 인스턴스
    """
    return Settings(settings_path)
