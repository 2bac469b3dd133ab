from pathlib import Path
from unittest.mock import patch

from selected_image_export.utils import file_ops, time_utils


def test_safe_copy2_success(tmp_path: Path) -> None:
    src = tmp_path / "source.txt"
    dst = tmp_path / "dest.txt"
    src.write_text("hello", encoding="utf-8")

    result = file_ops.safe_copy2(src, dst)

    assert result.success is True
    assert result.value == dst
    assert dst.read_text(encoding="utf-8") == "hello"


def test_safe_copy2_does_not_retry(tmp_path: Path) -> None:
    src = tmp_path / "source.txt"
    dst = tmp_path / "dest.txt"
    src.write_text("hello", encoding="utf-8")

    with patch(
        "selected_image_export.utils.file_ops.shutil.copy2",
        side_effect=[OSError("Network error"), None],
    ) as copy2:
        result = file_ops.safe_copy2(src, dst)

    assert result.success is False
    assert copy2.call_count == 1
    assert result.error_message is not None
    assert "Network error" in result.error_message


def test_safe_makedirs_existing(tmp_path: Path) -> None:
    target = tmp_path / "a" / "b"
    assert file_ops.safe_makedirs(target).success
    assert file_ops.safe_makedirs(target).success
    assert target.is_dir()


def test_safe_write_text(tmp_path: Path) -> None:
    target = tmp_path / "nested" / "out.json"
    result = file_ops.safe_write_text(target, "{}\n")
    assert result.success
    assert target.read_text(encoding="utf-8") == "{}\n"


def test_format_exif_date() -> None:
    assert time_utils.format_exif_date("2024:07:15 14:30:00") == "2024-07-15"
    assert time_utils.format_exif_date("garbage") is None


def test_file_creation_time_is_utc(tmp_path: Path) -> None:
    path = tmp_path / "a.jpg"
    path.write_bytes(b"x")
    with patch("selected_image_export.utils.time_utils.file_creation_timestamp", return_value=1667294396.0):
        assert time_utils.file_creation_time(path) == "2022-11-01T09:19:56Z"
        assert time_utils.file_creation_date(path) == "2022-11-01"
