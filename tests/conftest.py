"""Shared builders for DCP documents and PCM files."""

from pathlib import Path
from typing import Dict, List, Optional

import numpy as np
import pytest
import soundfile as sf

CPL_NS = "http://www.smpte-ra.org/schemas/429-7/2006/CPL"
STEREO_NS = "http://www.smpte-ra.org/schemas/429-10/2008/Main-Stereo-Picture-CPL"
AM_NS = "http://www.smpte-ra.org/schemas/429-9/2007/AM"


def _asset(tag: str, asset_id: Optional[str], entry: int, duration: int,
           frame_rate: Optional[str], key: bool) -> str:
    parts = [f"<{tag}>"]
    if asset_id is not None:
        parts.append(f"<Id>{asset_id}</Id>")
    parts.append("<EditRate>24 1</EditRate>")
    parts.append(f"<EntryPoint>{entry}</EntryPoint>")
    parts.append(f"<Duration>{duration}</Duration>")
    if key:
        parts.append("<KeyId>urn:uuid:key</KeyId>")
    if frame_rate is not None:
        parts.append(f"<FrameRate>{frame_rate}</FrameRate>")
    parts.append(f"</{tag.split()[0]}>")
    return "".join(parts)


def build_cpl(title: Optional[str], reels: List[Dict], extra: str = "") -> str:
    """
    Build a composition playlist.

    Each reel dict may hold: video, audio (asset Ids), video_entry,
    audio_entry, duration, audio_duration, frame_rate, stereo, key and
    inner (raw XML added to the asset list after the sound).
    """
    reel_xml = []
    for i, reel in enumerate(reels):
        duration = reel.get("duration", 240)
        assets = []
        if reel.get("stereo"):
            picture_tag = f'msp-cpl:MainStereoscopicPicture xmlns:msp-cpl="{STEREO_NS}"'
            assets.append(_asset(picture_tag, reel.get("video"), reel.get("video_entry", 0), duration,
                                 reel.get("frame_rate", "48 1"), reel.get("key", False)))
        else:
            assets.append(_asset("MainPicture", reel.get("video"), reel.get("video_entry", 0), duration,
                                 reel.get("frame_rate", "24 1"), reel.get("key", False)))
        if "audio" in reel:
            assets.append(_asset("MainSound", reel["audio"], reel.get("audio_entry", 0),
                                 reel.get("audio_duration", duration), None, reel.get("key", False)))
        assets.append(reel.get("inner", ""))
        reel_xml.append(
            f"<Reel><Id>urn:uuid:reel{i}</Id><AssetList>{''.join(assets)}</AssetList></Reel>"
        )
    title_xml = f"<ContentTitleText>{title}</ContentTitleText>" if title is not None else ""
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<CompositionPlaylist xmlns="{CPL_NS}">'
        "<Id>urn:uuid:cpl</Id>"
        f"{title_xml}{extra}"
        f"<ReelList>{''.join(reel_xml)}</ReelList>"
        "</CompositionPlaylist>"
    )


def build_assetmap(assets: Dict[str, str]) -> str:
    entries = "".join(
        f"<Asset><Id>{asset_id}</Id><ChunkList><Chunk><Path>{path}</Path></Chunk></ChunkList></Asset>"
        for asset_id, path in assets.items()
    )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<AssetMap xmlns="{AM_NS}"><Id>urn:uuid:map</Id><AssetList>{entries}</AssetList></AssetMap>'
    )


@pytest.fixture
def make_cpl(tmp_path):
    """Write a playlist (and optionally an asset map) into a package folder."""

    def _make(title="MyMovie_FTR-1_F_51_2K_20230101_FAC", reels=None, assets=None,
              folder="package", name="CPL_test.xml", extra=""):
        directory = tmp_path / folder
        directory.mkdir(parents=True, exist_ok=True)
        if assets is not None:
            (directory / "ASSETMAP").write_text(build_assetmap(assets), encoding="utf-8")
        reels = reels if reels is not None else [{"video": "urn:uuid:v1", "audio": "urn:uuid:a1"}]
        path = directory / name
        path.write_text(build_cpl(title, reels, extra), encoding="utf-8")
        return path

    return _make


def write_sized_file(path: Path, size: int) -> Path:
    """Create a sparse file of a given size."""
    with open(path, "wb") as fh:
        fh.truncate(size)
    return path


@pytest.fixture
def write_wav(tmp_path):
    """Write a (frames, channels) array to a WAV file in tmp_path."""

    def _write(data: np.ndarray, name="input.wav", samplerate=48000, subtype="FLOAT"):
        path = tmp_path / name
        sf.write(str(path), data, samplerate, subtype=subtype)
        return path

    return _write


@pytest.fixture
def channel_ramp():
    """Distinct, small, deterministic content for every channel."""

    def _ramp(frames: int, channels: int) -> np.ndarray:
        t = np.arange(frames, dtype=np.float32)[:, None]
        scale = (np.arange(channels, dtype=np.float32) + 1)[None, :]
        return (np.sin(t * 0.01 * scale) * 0.01 * scale).astype(np.float32)

    return _ramp
