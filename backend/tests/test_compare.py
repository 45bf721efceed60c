import math

import numpy as np
import pytest

from pixelcore.imgproc.compare import HU_MATCH_THRESHOLD, compare_hu, is_hu_match, sum_of_absolute_differences
from pixelcore.imgproc.errors import ShapeMismatchError

HU_A = [0.2, 0.01, 0.001, 0.0005, 1e-7, 2e-5, 1e-8]
HU_B = [0.25, 0.02, 0.002, 0.0004, 2e-7, 3e-5, -1e-8]


def test_sad_identity_and_symmetry():
    rng = np.random.default_rng(5)
    a = rng.integers(0, 256, size=(9, 11), dtype=np.uint8)
    b = rng.integers(0, 256, size=(9, 11), dtype=np.uint8)

    assert sum_of_absolute_differences(a, a) == 0
    assert sum_of_absolute_differences(a, b) == sum_of_absolute_differences(b, a)
    assert sum_of_absolute_differences(a, b) > 0


def test_sad_skips_border():
    a = np.zeros((5, 6), dtype=np.uint8)
    b = np.zeros((5, 6), dtype=np.uint8)
    b[0, :] = b[-1, :] = 255
    b[:, 0] = b[:, -1] = 255
    assert sum_of_absolute_differences(a, b) == 0

    b[2, 3] = 10
    assert sum_of_absolute_differences(a, b) == 10


def test_sad_color_skips_first_and_last_pixel_of_each_row():
    a = np.zeros((4, 4, 3), dtype=np.uint8)
    b = a.copy()
    b[1, 0, :] = 200
    b[2, 3, :] = 200
    b[1, 2, 1] = 7
    assert sum_of_absolute_differences(a, b) == 7


def test_sad_does_not_wrap_around():
    a = np.full((3, 3), 10, dtype=np.uint8)
    b = np.full((3, 3), 250, dtype=np.uint8)
    assert sum_of_absolute_differences(a, b) == 240


def test_sad_needs_matching_buffers():
    with pytest.raises(ShapeMismatchError):
        sum_of_absolute_differences(np.zeros((3, 3), np.uint8), np.zeros((3, 4), np.uint8))
    with pytest.raises(ShapeMismatchError):
        sum_of_absolute_differences(np.zeros((3, 3), np.uint8), np.zeros((3, 3, 3), np.uint8))


def test_compare_hu_identity_and_symmetry():
    assert compare_hu(HU_A, HU_A) == 0
    assert compare_hu(HU_A, HU_B) == compare_hu(HU_B, HU_A)
    assert compare_hu(HU_A, HU_B) > 0


def test_compare_hu_ignores_seventh_invariant():
    h1 = [1, 1, 1, 1, 1, 1, 5]
    h2 = [2, 1, 1, 1, 1, 1, -5]
    # ((2 - 1)^2 / (1 * 2))^2
    assert compare_hu(h1, h2) == pytest.approx(0.25)
    assert compare_hu(h1[:6], h1[:6] + [123.0]) == 0


def test_compare_hu_zero_invariant():
    assert compare_hu([1, 0, 1, 1, 1, 1], [1, 0, 1, 1, 1, 1]) == 0
    assert math.isinf(compare_hu([1, 0, 1, 1, 1, 1], [1, 0.5, 1, 1, 1, 1]))


def test_compare_hu_needs_six_values():
    with pytest.raises(ValueError):
        compare_hu([1, 2, 3], [1, 2, 3])


def test_match_threshold():
    assert HU_MATCH_THRESHOLD == 50
    assert is_hu_match(compare_hu(HU_A, HU_A))
    assert is_hu_match(10)
    assert not is_hu_match(60)
    assert not is_hu_match(math.inf)


def test_sad_empty_buffer():
    a = np.zeros((0, 0), dtype=np.uint8)
    assert sum_of_absolute_differences(a, a) == 0

    b = np.zeros((0, 4, 3), dtype=np.uint8)
    assert sum_of_absolute_differences(b, b.copy()) == 0
