import json

import numpy as np
import pytest
import soundfile as sf

from dcp_ripper.audio.downmix import remap_block
from dcp_ripper.cli.dcp_cli import main
from dcp_ripper.config import get_settings
from dcp_ripper.core.enums import Downmixer


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    for name in ("DOWNMIXER", "OUTPUT_CHANNELS", "MULTILINGUAL", "LOG_FILE"):
        monkeypatch.delenv(f"DCP_RIPPER_{name}", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_scan_json(make_cpl, tmp_path, capsys):
    make_cpl(title="Film_FTR_F_EN-XX_51_2K", folder="en")
    make_cpl(title="Film_FTR_F_FR-XX_51_2K", folder="fr")

    assert main(["scan", str(tmp_path), "--json", "--multilingual"]) == 0

    document = json.loads(capsys.readouterr().out)
    assert len(document["compositions"]) == 2
    assert document["failures"] == []
    first = document["compositions"][0]
    assert first["metadata"]["content_type"] == "Feature"
    assert first["metadata"]["audio"] == "5.1"
    assert first["metadata"]["language"] == "EN-XX"
    assert first["reels"][0]["framerate"] == 24.0
    assert len(document["groups"]) == 1
    assert document["groups"][0]["main"].endswith("CPL_test.xml")
    assert len(document["groups"][0]["others"]) == 1


def test_scan_reports_failures(tmp_path, capsys):
    broken = tmp_path / "CPL_broken.xml"
    broken.write_text(
        "<CompositionPlaylist><ContentTitleText>Broken_TLR</ContentTitleText>"
        "<ReelList><Reel><MainPicture><EntryPoint>start</EntryPoint></MainPicture></Reel></ReelList>"
        "</CompositionPlaylist>",
        encoding="utf-8",
    )
    assert main(["scan", str(tmp_path)]) == 1
    assert "Broken Trailer" in capsys.readouterr().err


def test_downmix_auro_title(write_wav, channel_ramp, tmp_path, capsys):
    data = channel_ramp(400, 12)
    source = write_wav(data)
    target = tmp_path / "out.wav"

    assert main(["downmix", str(source), str(target), "--title", "Film_FTR_F_51-Auro_2K"]) == 0

    assert capsys.readouterr().out.strip() == str(target)
    out, _ = sf.read(str(target), dtype="float32", always_2d=True)
    np.testing.assert_allclose(out, remap_block(data, Downmixer.AURO_SURROUND), atol=1e-6)


def test_downmix_strategy_and_channels(write_wav, channel_ramp, tmp_path):
    source = write_wav(channel_ramp(400, 12))
    target = tmp_path / "stereo.wav"
    assert main(["downmix", str(source), str(target), "--strategy", "cavern-auto", "--channels", "2"]) == 0
    assert sf.info(str(target)).channels == 2


def test_downmix_missing_input(tmp_path):
    assert main(["downmix", str(tmp_path / "missing.wav")]) == 1
