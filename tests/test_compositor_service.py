from __future__ import annotations

import numpy as np
import pytest

from graymix.models.errors import SizeMismatchError
from graymix.models.image_model import GrayscaleBuffer
from graymix.services.compositor_service import CompositorService
from graymix.services.pattern_service import PatternService


@pytest.fixture
def compositor() -> CompositorService:
    return CompositorService()


@pytest.fixture
def pair():
    patterns = PatternService()
    return patterns.gradient_diagonal(16, 12), patterns.gradient_radial(16, 12)


def test_blend_zero_alpha_returns_a(compositor, pair):
    a, b = pair
    out = compositor.blend(a, b, GrayscaleBuffer.filled(16, 12, 0))
    assert out == a


def test_blend_full_alpha_returns_b(compositor, pair):
    a, b = pair
    out = compositor.blend(a, b, GrayscaleBuffer.filled(16, 12, 255))
    assert out == b


def test_blend_half_alpha_black_white(compositor):
    a = GrayscaleBuffer.filled(4, 4, 0)
    b = GrayscaleBuffer.filled(4, 4, 255)
    out = compositor.blend(a, b, PatternService().uniform_alpha(4, 4))
    assert set(out.samples.tolist()) == {128}


def test_blend_matches_integer_formula(compositor, pair):
    a, b = pair
    alpha = PatternService().alpha_radial(16, 12)
    out = compositor.blend(a, b, alpha)
    for i in (0, 7, 50, 100, 191):
        w = int(alpha.samples[i])
        expected = ((255 - w) * int(a.samples[i]) + w * int(b.samples[i]) + 127) // 255
        assert int(out.samples[i]) == expected


def test_blend_rejects_mismatched_sizes(compositor):
    a = GrayscaleBuffer.filled(4, 4, 0)
    b = GrayscaleBuffer.filled(4, 4, 0)
    alpha = GrayscaleBuffer.filled(2, 2, 0)
    with pytest.raises(SizeMismatchError) as info:
        compositor.blend(a, b, alpha)
    assert info.value.mismatch.offenders == (("Alpha", (2, 2)),)


def test_blend_does_not_touch_inputs(compositor, pair):
    a, b = pair
    before_a, before_b = a.samples.copy(), b.samples.copy()
    out = compositor.blend(a, b, GrayscaleBuffer.filled(16, 12, 90))
    assert np.array_equal(a.samples, before_a)
    assert np.array_equal(b.samples, before_b)
    assert out.samples is not a.samples


def test_circular_mask_on_white_512(compositor):
    white = GrayscaleBuffer.filled(512, 512, 255)
    out = compositor.apply_circular_mask(white)
    assert out.pixel(256, 256) == 255
    assert out.pixel(0, 0) == 0
    assert out.pixel(511, 511) == 0


def test_circular_mask_is_binary_closed_disk(compositor):
    mask = compositor.circular_mask(21, 21)
    arr = mask.as_array()
    assert set(np.unique(arr).tolist()) == {0, 255}
    # center (10, 10), r = 9.45: (10, 1) is at distance 9 -> inside, (10, 0) at 10 -> outside
    assert arr[1, 10] == 255
    assert arr[0, 10] == 0


def test_circular_mask_preserves_inside_values(compositor):
    image = PatternService().gradient_diagonal(30, 20)
    out = compositor.apply_circular_mask(image)
    mask = compositor.circular_mask(30, 20).samples == 255
    assert np.array_equal(out.samples[mask], image.samples[mask])
    assert not out.samples[~mask].any()


def test_circular_mask_is_idempotent(compositor):
    image = PatternService().gradient_radial(33, 19)
    once = compositor.apply_circular_mask(image)
    assert compositor.apply_circular_mask(once) == once
