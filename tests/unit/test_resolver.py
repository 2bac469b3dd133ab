import logging
from pathlib import Path

from selected_image_export.core import ImageResolver


def _touch(folder: Path, *names: str) -> None:
    for name in names:
        (folder / name).write_bytes(b"data")


def test_resolve_keeps_listing_order(tmp_path: Path) -> None:
    _touch(tmp_path, "c.jpg", "a.jpg", "b.jpg", "z.jpg")
    resolver = ImageResolver()

    result = resolver.resolve({"c.jpg": 1, "a.jpg": 2}, tmp_path)

    assert [image.name for image in result.images] == ["a.jpg", "c.jpg"]
    assert [image.discovery_index for image in result.images] == [0, 1]
    assert [image.order for image in result.images] == [2, 1]
    assert [image.name for image in result.in_selection_order()] == ["c.jpg", "a.jpg"]
    assert result.images[0].source_path == tmp_path / "a.jpg"
    assert result.images[0].stem == "a"


def test_resolve_ignores_directories(tmp_path: Path) -> None:
    (tmp_path / "sub.jpg").mkdir()
    _touch(tmp_path, "a.jpg")

    result = ImageResolver().resolve({"sub.jpg": 1, "a.jpg": 2}, tmp_path)

    assert [image.name for image in result.images] == ["a.jpg"]
    assert result.missing == ["sub.jpg"]


def test_resolve_reports_missing(tmp_path: Path, caplog) -> None:
    _touch(tmp_path, "a.jpg")

    with caplog.at_level(logging.WARNING, logger="selected_image_export"):
        result = ImageResolver().resolve({"a.jpg": 1, "gone.jpg": 2}, tmp_path)

    assert result.missing == ["gone.jpg"]
    assert "gone.jpg" in caplog.text


def test_resolve_nothing_to_do(tmp_path: Path) -> None:
    resolver = ImageResolver()
    assert resolver.resolve({}, tmp_path) is None
    assert resolver.resolve({"a.jpg": 1}, tmp_path / "missing") is None


def test_resolve_no_match(tmp_path: Path) -> None:
    _touch(tmp_path, "a.jpg")
    result = ImageResolver().resolve({"b.jpg": 1}, tmp_path)
    assert result.nothing_selected
    assert result.missing == ["b.jpg"]
