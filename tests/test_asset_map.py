from dcp_ripper.core.asset_map import find_asset_map, list_essence_files, parse_asset_map

from conftest import build_assetmap


def test_missing_asset_map_is_empty(tmp_path):
    assert find_asset_map(tmp_path) is None
    assert parse_asset_map(tmp_path) == {}


def test_parse_asset_map(tmp_path):
    (tmp_path / "ASSETMAP").write_text(build_assetmap({
        "urn:uuid:v1": "video_r1.mxf",
        "urn:uuid:a1": "audio_r1.mxf",
    }), encoding="utf-8")
    assert parse_asset_map(tmp_path) == {
        "urn:uuid:v1": "video_r1.mxf",
        "urn:uuid:a1": "audio_r1.mxf",
    }


def test_smpte_asset_map_name(tmp_path):
    (tmp_path / "ASSETMAP.xml").write_text(build_assetmap({"urn:uuid:v1": "v.mxf"}), encoding="utf-8")
    assert find_asset_map(tmp_path) == tmp_path / "ASSETMAP.xml"
    assert parse_asset_map(tmp_path) == {"urn:uuid:v1": "v.mxf"}


def test_interop_name_is_preferred(tmp_path):
    (tmp_path / "ASSETMAP").write_text(build_assetmap({"urn:uuid:v1": "interop.mxf"}), encoding="utf-8")
    (tmp_path / "ASSETMAP.xml").write_text(build_assetmap({"urn:uuid:v1": "smpte.mxf"}), encoding="utf-8")
    assert parse_asset_map(tmp_path) == {"urn:uuid:v1": "interop.mxf"}


def test_duplicate_id_keeps_first_path(tmp_path):
    document = (
        '<?xml version="1.0" encoding="UTF-8"?>'
        "<AssetMap><Id>urn:uuid:map</Id><AssetList>"
        "<Asset><Id>urn:uuid:v1</Id><ChunkList><Chunk><Path>first.mxf</Path></Chunk></ChunkList></Asset>"
        "<Asset><Id>urn:uuid:v1</Id><ChunkList><Chunk><Path>second.mxf</Path></Chunk></ChunkList></Asset>"
        "</AssetList></AssetMap>"
    )
    (tmp_path / "ASSETMAP").write_text(document, encoding="utf-8")
    assert parse_asset_map(tmp_path)["urn:uuid:v1"] == "first.mxf"


def test_list_essence_files(tmp_path):
    for name in ("b_audio.MXF", "a_video.mxf", "CPL.xml", "notes.txt"):
        (tmp_path / name).write_bytes(b"\0")
    (tmp_path / "folder.mxf").mkdir()
    assert [p.name for p in list_essence_files(tmp_path)] == ["a_video.mxf", "b_audio.MXF"]


def test_malformed_asset_map_is_ignored(tmp_path):
    (tmp_path / "ASSETMAP").write_text("<AssetMap><AssetList><Asset>", encoding="utf-8")
    assert parse_asset_map(tmp_path) == {}
