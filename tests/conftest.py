from pathlib import Path

import pytest


@pytest.fixture
def make_ini(tmp_path: Path):
    def _make(text: str, name: str = 'Example.ini') -> Path:
        path = tmp_path / name
        path.write_text(text, encoding='utf-8')
        return path
    return _make
