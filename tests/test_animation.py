import numpy as np
import pytest
from PIL import Image

from gif_builder import G, R, build_gif, solid
from ledgif import DecodedFrame, Disposal, GifAnimation, GifDecoder
from ledgif.normalizer import normalize, to_rows


@pytest.fixture
def animation():
    return GifDecoder.decode_bytes(build_gif(4, 2, [
        solid(4, 2, R, delay=10),
        solid(2, 2, G, delay=20, disposal=2),
    ]))


def test_timing(animation):
    assert animation.frame_delay == 10
    assert [f.duration_ms for f in animation.frames] == [100, 200]
    assert animation.total_duration_ms == 300


def test_get_frame_image(animation):
    img = animation.get_frame_image(2)
    assert img.mode == 'RGBA'
    assert img.size == (4, 2)
    assert img.getpixel((0, 0)) == (0, 255, 0, 255)
    assert img.getpixel((3, 1)) == (255, 0, 0, 255)


def test_get_frame_image_resized(animation):
    assert animation.get_frame_image(1, scale=2).size == (8, 4)
    assert animation.get_frame_image(1, target_width=8).size == (8, 4)
    assert animation.get_frame_image(1, target_height=1).size == (2, 1)
    assert animation.get_frame_image(1, target_width=3, target_height=3).size == (3, 3)
    assert animation.get_frame_image(1, scale=1.5).size == (6, 3)
    assert animation.get_frame_image(1).size == (4, 2)


@pytest.mark.parametrize('frame_number', [0, 3, -1])
def test_get_frame_image_out_of_range(animation, frame_number):
    with pytest.raises(IndexError):
        animation.get_frame_image(frame_number)


def test_save_to_webp(animation, tmp_path):
    path = tmp_path / 'out.webp'
    animation.save_to_webp(str(path))

    with Image.open(path) as img:
        assert img.format == 'WEBP'
        assert img.size == (4, 2)
        assert getattr(img, 'n_frames', 1) == 2


def test_save_frames(animation, tmp_path):
    paths = animation.save_frames(str(tmp_path / 'frames'), scale=2)
    assert len(paths) == 2
    with Image.open(paths[1]) as img:
        assert img.size == (8, 4)
        assert img.convert('RGBA').getpixel((0, 0)) == (0, 255, 0, 255)


def test_to_dataframe(animation):
    df = animation.to_dataframe()
    assert list(df.columns) == ['Frame', 'Delay (1/100 s)', 'Duration (ms)', 'Disposal', 'Opaque Pixels']
    assert df['Frame'].tolist() == [0, 1]
    assert df['Delay (1/100 s)'].tolist() == [10, 20]
    assert df['Disposal'].tolist() == ['none', 'restore_to_background']
    assert df['Opaque Pixels'].tolist() == [8, 8]


def test_frame_shape_is_checked():
    frame = DecodedFrame(index=0, pixels=np.zeros((2, 2, 4), dtype=np.uint8), delay=0, disposal=Disposal.NONE)
    with pytest.raises(ValueError):
        GifAnimation(3, 2, [frame])


def test_save_empty_animation_raises(tmp_path):
    with pytest.raises(ValueError):
        GifAnimation(2, 2, []).save_to_webp(str(tmp_path / 'empty.webp'))


def test_normalize_copies_and_freezes():
    surface = np.arange(2 * 3 * 4, dtype=np.uint8).reshape(2, 3, 4)
    grid = normalize(surface)

    assert grid.dtype == np.uint8
    assert grid.flags.c_contiguous
    assert not grid.flags.writeable
    surface[0, 0, 0] = 99
    assert grid[0, 0, 0] == 0


def test_normalize_rejects_non_rgba():
    with pytest.raises(ValueError):
        normalize(np.zeros((2, 2, 3), dtype=np.uint8))


def test_to_rows():
    grid = np.zeros((1, 2, 4), dtype=np.uint8)
    grid[0, 1] = (1, 2, 3, 4)
    assert to_rows(grid) == [[(0, 0, 0, 0), (1, 2, 3, 4)]]
