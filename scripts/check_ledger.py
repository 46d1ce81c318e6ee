#!/usr/bin/env python3
"""
Ledger 상태 확인 스크립트

DB 스키마/유일 인덱스를 준비하고 하이브리드 계정 트리와 잔액을 출력.
--seed를 주면 계정과목표가 비어 있을 때 기본 계정과목표를 먼저 저장.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from adapters.db.document_store import SQLiteDocumentStore
from adapters.db.sqlite_adapter import SQLiteAdapter, get_db_path
from core.config.loader import get_settings
from core.ledger import tree
from core.ledger.hybrid import HybridLedgerView
from core.ledger.repository import LedgerRepository
from core.ledger.service import AccountService
from core.ledger.tree import AccountNode

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger(__name__)


def render_tree(nodes: list[AccountNode], depth: int = 0) -> list[str]:
    """트리를 들여쓰기 텍스트 줄로 변환"""
    lines = []
    for node in nodes:
        account = node.account
        marker = "*" if account.is_virtual else " "
        lines.append(
            f"{'  ' * depth}{marker}{account.code:<14} {account.display_name:<30} {account.balance:>14}"
        )
        lines.extend(render_tree(node.children, depth + 1))
    return lines


async def main(seed: bool, db_path: Path | None = None) -> int:
    """트리 출력

    Returns:
        종료 코드 (경고가 있으면 1)
    """
    settings = get_settings().ledger
    db_path = get_db_path(db_path or settings.db_path)
    
    logger.info(f"DB Path: {db_path}")
    
    async with SQLiteAdapter(db_path) as db:
        store = SQLiteDocumentStore(db)
        await store.initialize()
        repository = LedgerRepository(store)
        
        if seed:
            inserted = await AccountService(repository, settings).initialize_default_chart()
            logger.info(f"기본 계정과목표 저장: {inserted}개")
        
        result = await HybridLedgerView(repository, settings).build()
    
    for line in render_tree(tree.build(result.accounts, settings.sibling_order)):
        print(line)
    
    for warning in result.warnings:
        logger.warning(warning)
    
    return 1 if result.degraded else 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="하이브리드 계정과목 트리 확인")
    parser.add_argument(
        "--seed",
        action="store_true",
        help="계정과목표가 비어 있으면 기본 계정과목표 저장",
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="DB 파일 경로 (기본: settings.yaml의 ledger.db_path)",
    )
    args = parser.parse_args()
    
    sys.exit(asyncio.run(main(args.seed, args.db)))
