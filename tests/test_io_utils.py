from pathlib import Path

from blogsite import io_utils


def test_write_json_stable_sorts_keys_and_keeps_unicode(tmp_path: Path):
    path = io_utils.write_json_stable(tmp_path / "pages" / "2.json", {"page": 2, "message": "Não"})

    assert path.read_text(encoding="utf-8") == '{\n  "message": "Não",\n  "page": 2\n}\n'


def test_io_utils_exports_only_writers():
    assert io_utils.__all__ == ["ensure_dir", "stable_json_dumps", "write_json_stable", "write_text"]
