import numpy as np
import pytest

from pixelcore.imgproc.convolution import apply_kernel, average, combine, hypotenuse, sobel_magnitude
from pixelcore.imgproc.errors import ShapeMismatchError
from pixelcore.imgproc.kernels import SHARPEN, SOBEL_X, as_kernel


def _framed(value, inner=5):
    img = np.zeros((inner + 2, inner + 2), dtype=np.uint8)
    img[1:-1, 1:-1] = value
    return img


def _border(img):
    return np.concatenate([img[0].ravel(), img[-1].ravel(), img[:, 0].ravel(), img[:, -1].ravel()])


def test_sharpen_on_saturated_square():
    out = apply_kernel(_framed(255), SHARPEN)

    assert out.shape == (7, 7)
    assert (out[1:-1, 1:-1] == 255).all()
    assert (_border(out) == 0).all()


def test_sharpen_edges_follow_neighbour_count():
    out = apply_kernel(_framed(50), SHARPEN)

    # 5*50 minus one 50 per foreground 4-neighbour
    assert out[3, 3] == 50      # 4 neighbours
    assert out[1, 3] == 100     # 3 neighbours, one in the zero frame
    assert out[1, 1] == 150     # 2 neighbours
    assert out[5, 5] == 150


def test_kernel_is_mirrored_against_neighbourhood():
    src = np.arange(25, dtype=np.uint8).reshape(5, 5)

    top_left_weight = [1, 0, 0,
                       0, 0, 0,
                       0, 0, 0]
    out = apply_kernel(src, top_left_weight)
    # kernel (0, 0) reads the bottom-right neighbour
    assert (out[1:-1, 1:-1] == src[2:, 2:]).all()

    bottom_right_weight = [0, 0, 0,
                           0, 0, 0,
                           0, 0, 1]
    out = apply_kernel(src, bottom_right_weight)
    assert (out[1:-1, 1:-1] == src[:-2, :-2]).all()


def test_absolute_value_of_negative_response():
    src = np.full((4, 4), 40, dtype=np.uint8)
    out = apply_kernel(src, [0, 0, 0, 0, -1, 0, 0, 0, 0])
    assert (out[1:-1, 1:-1] == 40).all()


def test_channels_filtered_independently():
    rng = np.random.default_rng(3)
    src = rng.integers(0, 256, size=(6, 7, 3), dtype=np.uint8)

    # kernel (1, 2) pairs with the neighbour to the left
    out = apply_kernel(src, [0, 0, 0, 0, 0, 1, 0, 0, 0])

    assert out.shape == src.shape
    assert (out[1:-1, 1:-1, :] == src[1:-1, :-2, :]).all()
    assert (out[:, 0, :] == 0).all() and (out[:, -1, :] == 0).all()
    assert (out[0] == 0).all() and (out[-1] == 0).all()


def test_tiny_buffer_is_all_border():
    out = apply_kernel(np.full((2, 5), 9, dtype=np.uint8), SHARPEN)
    assert out.shape == (2, 5)
    assert not out.any()


def test_output_is_a_new_buffer():
    src = _framed(20)
    before = src.copy()
    out = apply_kernel(src, SHARPEN)
    assert out is not src
    assert (src == before).all()


def test_kernel_shapes():
    assert as_kernel(SHARPEN).shape == (3, 3)
    assert (as_kernel([[0, -1, 0], [-1, 5, -1], [0, -1, 0]]) == as_kernel(SHARPEN)).all()
    with pytest.raises(ShapeMismatchError):
        as_kernel([1, 2, 3, 4])
    with pytest.raises(ShapeMismatchError):
        as_kernel(np.ones((1, 9)))


def test_kernel_is_read_only():
    k = as_kernel(SOBEL_X)
    with pytest.raises(ValueError):
        k[0, 0] = 7


def test_combine_saturates_and_checks_shape():
    a = np.full((3, 3), 200, dtype=np.uint8)
    b = np.full((3, 3), 100, dtype=np.uint8)

    assert (combine(a, b, lambda x, y: x + y) == 255).all()
    assert (combine(b, a, lambda x, y: x - y) == 0).all()
    with pytest.raises(ShapeMismatchError):
        combine(a, np.zeros((3, 4), dtype=np.uint8), average)


def test_hypotenuse_and_average():
    a = np.full((2, 2), 3, dtype=np.uint8)
    b = np.full((2, 2), 4, dtype=np.uint8)
    assert (combine(a, b, hypotenuse) == 5).all()
    assert (combine(a, b, average) == 3).all()


def test_sobel_magnitude_of_vertical_step():
    gray = np.zeros((5, 5), dtype=np.uint8)
    gray[:, 2:] = 100

    mag = sobel_magnitude(gray)

    assert (mag[1:-1, 1] == 255).all()
    assert (mag[1:-1, 2] == 255).all()
    assert (mag[1:-1, 3] == 0).all()
    assert (_border(mag) == 0).all()
