from __future__ import annotations

import io
import sys

import numpy as np
import pytest
from PIL import Image

from pulsewave.common.errors import ExporterUnavailableError
from pulsewave.engine.export.gif import (
    GifEncoder,
    GifExportParams,
    fit_frame,
    frame_delay_ms,
    letterbox_frame,
    quantize_frame,
    total_frames,
)


def _solid(h: int, w: int, rgb: tuple[int, int, int]) -> np.ndarray:
    arr = np.zeros((h, w, 3), dtype=np.uint8)
    arr[:, :] = rgb
    return arr


@pytest.mark.smoke
def test_frame_count_and_delay() -> None:
    assert total_frames(5, 10) == 50
    assert total_frames(0, 30) == 1
    assert total_frames(0.25, 10) == 3
    assert frame_delay_ms(30) == 33
    assert frame_delay_ms(10) == 100


@pytest.mark.parametrize("quality, colors", [(1, 256), (10, 184), (30, 24), (99, 24), (0, 256)])
def test_quality_maps_to_palette_size(quality: int, colors: int) -> None:
    assert GifExportParams(quality=quality).palette_colors == colors


def test_fit_frame_untouched_inside_box() -> None:
    src = _solid(20, 40, (1, 2, 3))
    assert fit_frame(src, 100, 100) is src


def test_fit_frame_contain_letterboxes() -> None:
    src = _solid(100, 200, (255, 255, 255))
    out = fit_frame(src, 100, 100, contain=True, background="black")
    assert out.shape == (100, 100, 3)
    # 上下に余白（黒）、中央は白
    assert tuple(out[0, 50]) == (0, 0, 0)
    assert out[50, 50].min() > 200


def test_fit_frame_stretch_and_single_axis() -> None:
    src = _solid(100, 200, (255, 255, 255))
    assert fit_frame(src, 100, 100, contain=False).shape == (100, 100, 3)
    assert fit_frame(src, 100, None).shape == (50, 100, 3)


def test_quantize_keeps_shape() -> None:
    src = np.random.default_rng(0).integers(0, 255, size=(16, 16, 3), dtype=np.uint8)
    out = quantize_frame(src, 16)
    assert out.shape == src.shape
    assert len(np.unique(out.reshape(-1, 3), axis=0)) <= 16


@pytest.mark.integration
def test_encode_to_bytes_round_trip() -> None:
    enc = GifEncoder(GifExportParams(fps=10))
    for rgb in ((255, 0, 0), (0, 255, 0), (0, 0, 255)):
        enc.add_frame(_solid(20, 30, rgb), 100)
    assert enc.frame_count == 3
    data = enc.finish()
    assert isinstance(data, bytes)
    assert data[:6] == b"GIF89a"
    with Image.open(io.BytesIO(data)) as im:
        assert im.size == (30, 20)
        assert im.n_frames == 3


@pytest.mark.integration
def test_encode_to_file_leaves_no_part(tmp_path) -> None:
    path = tmp_path / "out" / "ecg.gif"
    enc = GifEncoder(GifExportParams(max_width=15), path)
    enc.add_frame(_solid(20, 30, (255, 0, 0)), 50)
    enc.add_frame(_solid(20, 30, (0, 255, 0)), 50)
    assert enc.finish() == path
    assert path.exists()
    assert not (tmp_path / "out" / "ecg.gif.part").exists()
    with Image.open(path) as im:
        assert im.size == (15, 10)


def test_finish_without_frames_fails() -> None:
    enc = GifEncoder()
    with pytest.raises(ValueError):
        enc.finish()


def test_missing_imageio_is_reported(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(sys.modules, "imageio", None)
    monkeypatch.setitem(sys.modules, "imageio.v3", None)
    with pytest.raises(ExporterUnavailableError):
        GifEncoder()


def test_letterbox_frame_pads_to_exact_size() -> None:
    src = _solid(40, 40, (255, 255, 255))
    out = letterbox_frame(src, 60, 20, background="black")
    assert out.shape == (20, 60, 3)
    assert tuple(out[10, 0]) == (0, 0, 0)
    assert out[10, 30].min() > 200


@pytest.mark.integration
def test_frames_of_another_size_follow_first_frame() -> None:
    enc = GifEncoder(GifExportParams(fps=10))
    enc.add_frame(_solid(20, 30, (255, 0, 0)), 100)
    enc.add_frame(_solid(40, 50, (0, 255, 0)), 100)
    assert enc.source_size == (30, 20)
    data = enc.finish()
    with Image.open(io.BytesIO(data)) as im:
        assert im.size == (30, 20)
        assert im.n_frames == 2
