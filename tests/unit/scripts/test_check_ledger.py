"""
scripts/check_ledger.py 테스트
"""

from pathlib import Path

import pytest

from core.ledger import tree
from scripts.check_ledger import main, render_tree
from tests.helpers import make_account


class TestRenderTree:
    """render_tree 테스트"""
    
    def test_indentation(self) -> None:
        """하위 계정은 들여쓰기"""
        root = make_account("1", name="Assets")
        child = make_account("101", parent=root, name="Cash")
        
        lines = render_tree(tree.build([root, child]))
        
        assert len(lines) == 2
        assert lines[0].startswith(" 1")
        assert lines[1].startswith("   101")
        assert "Cash" in lines[1]


class TestMain:
    """main 테스트"""
    
    @pytest.mark.asyncio
    async def test_seed_and_print(self, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        """기본 계정과목표 저장 후 트리 출력"""
        exit_code = await main(seed=True, db_path=tmp_path / "ledger.db")
        
        out = capsys.readouterr().out
        assert exit_code == 0
        assert "Students" in out or "الطلبة" in out
        assert len(out.strip().splitlines()) == 13
    
    @pytest.mark.asyncio
    async def test_empty_chart_warns(self, tmp_path: Path) -> None:
        """빈 계정과목표 → 앵커 없음 경고, 종료 코드 1"""
        exit_code = await main(seed=False, db_path=tmp_path / "ledger.db")
        
        assert exit_code == 1
