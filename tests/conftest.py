import json
from pathlib import Path

import pytest

from roster_forms.sample_templates import build_all


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "templates"
    build_all(directory)
    return directory


@pytest.fixture
def write_json(tmp_path: Path):
    def _write(payload, name="data2.json") -> Path:
        p = tmp_path / name
        p.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
        return p
    return _write


@pytest.fixture
def students() -> list[dict]:
    return [
        {"code": "HS001", "name": "Nguyễn Văn An", "name2": "An", "year": "2010",
         "school": "THCS Lê Quý Đôn", "address": "12 Trần Hưng Đạo", "address2": "Quận 1"},
        {"code": "HS002", "name": "Trần Thị Bình", "name2": "Binh", "year": None,
         "school": "THCS Nguyễn Du", "address": "45 Lý Thường Kiệt"},
    ]
