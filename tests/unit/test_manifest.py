import json
import os
from pathlib import Path

import piexif
from PIL import Image

from selected_image_export.core import ManifestBuilder, ManifestFormat, RecordDefaults
from selected_image_export.models import ResolvedImage

# 2022-11-01T09:19:56Z
CREATED_AT = 1667294396


def _create_image(path: Path, fmt: str = "jpeg", exif: bytes = b"") -> None:
    image = Image.new("RGB", (40, 30), color=(0, 128, 255))
    if exif:
        image.save(path, fmt, exif=exif)
    else:
        image.save(path, fmt)
    os.utime(path, (CREATED_AT, CREATED_AT))


def _resolved(path: Path, order: int, index: int = 0) -> ResolvedImage:
    return ResolvedImage(name=path.name, source_path=path, discovery_index=index, order=order)


def test_build_record_defaults(tmp_path: Path) -> None:
    path = tmp_path / "00000018.jpg"
    _create_image(path)

    builder = ManifestBuilder()
    payload = json.loads(builder.render(builder.build([_resolved(path, 1)], collection_id=4711)))

    assert payload == {
        "Bilder": [
            {
                "Id": "00000018",
                "Titel": "00000018.jpg",
                "alt_text": "00000018.jpg",
                "SymbolBild": True,
                "media_type": "jpeg",
                "Aufnahmedatum": "2022-11-01",
                "Copyright BDA": "ja",
                "Dateiinformation": "00000018.jpg",
                "publikationsfähig": "ja",
                "Migrierte Information": None,
            }
        ],
        "HERIS-ID": 4711,
    }


def test_build_places_records_by_order(tmp_path: Path) -> None:
    first = tmp_path / "a.jpg"
    second = tmp_path / "b.png"
    _create_image(first)
    _create_image(second, "png")

    builder = ManifestBuilder()
    manifest = builder.build([_resolved(first, 3, 0), _resolved(second, 1, 1)])

    assert len(manifest.images) == 3
    assert manifest.images[0].title == "b.png"
    assert manifest.images[0].media_type == "png"
    assert manifest.images[1] is None
    assert manifest.images[2].title == "a.jpg"
    assert manifest.holes == [1]
    assert json.loads(builder.render(manifest))["Bilder"][1] is None


def test_build_duplicate_order_keeps_first(tmp_path: Path) -> None:
    first = tmp_path / "a.jpg"
    second = tmp_path / "b.jpg"
    _create_image(first)
    _create_image(second)

    manifest = ManifestBuilder().build([_resolved(second, 1, 1), _resolved(first, 1, 0)])

    assert [record.title for record in manifest.images] == ["a.jpg"]


def test_custom_field_names_and_tokens(tmp_path: Path) -> None:
    path = tmp_path / "a.jpg"
    _create_image(path)
    manifest_format = ManifestFormat.from_config(
        {
            "images": "images",
            "herisId": "",
            "idName": "Kennung",
            "true_token": "yes",
            "false_token": "no",
            "token_fields": ["copyRightBDA"],
        }
    )
    defaults = RecordDefaults(is_symbol=False, is_copyright_flag=False, is_publishable=False)
    builder = ManifestBuilder(manifest_format, defaults)

    payload = builder.to_dict(builder.build([_resolved(path, 1)]))
    record = payload["images"][0]

    assert payload["HERIS-ID"] == 0
    assert record["Kennung"] == "a"
    assert "Id" not in record
    assert record["SymbolBild"] is False
    assert record["Copyright BDA"] == "no"
    assert record["publikationsfähig"] is False


def test_creation_date_from_exif(tmp_path: Path) -> None:
    path = tmp_path / "a.jpg"
    exif = piexif.dump({"0th": {}, "Exif": {piexif.ExifIFD.DateTimeOriginal: b"2019:05:04 10:11:12"}})
    _create_image(path, exif=exif)

    exif_builder = ManifestBuilder(defaults=RecordDefaults(creation_date_source="exif"))
    assert exif_builder.build_record(_resolved(path, 1)).creation_date == "2019-05-04"
    assert ManifestBuilder().build_record(_resolved(path, 1)).creation_date == "2022-11-01"


def test_unreadable_image_falls_back_to_extension(tmp_path: Path) -> None:
    path = tmp_path / "scan.tif"
    path.write_bytes(b"not an image")

    record = ManifestBuilder().build_record(_resolved(path, 1))
    assert record.media_type == "tiff"


def test_oversized_image_falls_back_to_extension_and_file_date(tmp_path: Path, monkeypatch) -> None:
    path = tmp_path / "00000018.jpg"
    _create_image(path)
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 500)

    record = ManifestBuilder().build_record(_resolved(path, 1))
    assert record.media_type == "jpeg"
    assert record.creation_date == "2022-11-01"

    exif_builder = ManifestBuilder(defaults=RecordDefaults(creation_date_source="exif"))
    assert exif_builder.build_record(_resolved(path, 1)).creation_date == "2022-11-01"


def test_write_manifest(tmp_path: Path) -> None:
    path = tmp_path / "a.jpg"
    _create_image(path)
    builder = ManifestBuilder()
    target = tmp_path / "data" / "selected.json"

    builder.write(builder.build([_resolved(path, 1)]), target)

    text = target.read_text(encoding="utf-8")
    assert "publikationsfähig" in text
    assert json.loads(text)["Bilder"][0]["Id"] == "a"
    assert not target.with_name("selected.json.tmp").exists()


def test_empty_manifest() -> None:
    builder = ManifestBuilder()
    assert builder.to_dict(builder.build([])) == {"Bilder": [], "HERIS-ID": 0}
