from __future__ import annotations

import math

import numpy as np
import pytest

from graymix.services.pattern_service import PatternService, cosine_profile, round_to_u8


@pytest.fixture
def patterns() -> PatternService:
    return PatternService()


def _round_half_up(v: float) -> int:
    return int(math.floor(v + 0.5))


def test_circle_center_is_white(patterns):
    buf = patterns.circle(5, 5)
    assert buf.pixel(2, 2) == 255


def test_circle_matches_cosine_falloff(patterns):
    buf = patterns.circle(5, 5)
    r = 5 * 0.45
    t = 2.0 / r
    assert buf.pixel(2, 0) == _round_half_up(255 * math.cos(t * math.pi / 2))
    # corners lie outside the disk
    assert buf.pixel(0, 0) == 0
    assert buf.pixel(4, 4) == 0


def test_circle_boundary_rounds_to_zero():
    assert int(round_to_u8(255.0 * cosine_profile(1.0))) == 0
    assert int(round_to_u8(255.0 * cosine_profile(0.0))) == 255


def test_circle_outside_radius_is_black(patterns):
    w, h = 40, 30
    arr = patterns.circle(w, h).as_array()
    ys, xs = np.mgrid[0:h, 0:w]
    outside = np.hypot(xs - (w - 1) / 2, ys - (h - 1) / 2) > 0.45 * min(w, h)
    assert not arr[outside].any()


def test_gradient_horizontal_rounds_half_away_from_zero(patterns):
    buf = patterns.gradient_horizontal(11, 1)
    # 255 * 3 / 10 = 76.5
    assert buf.pixel(3, 0) == 77
    assert buf.pixel(0, 0) == 0
    assert buf.pixel(10, 0) == 255


def test_gradient_horizontal_rows_are_identical(patterns):
    arr = patterns.gradient_horizontal(6, 4).as_array()
    assert all((row == arr[0]).all() for row in arr)


def test_gradient_diagonal(patterns):
    buf = patterns.gradient_diagonal(3, 3)
    assert buf.pixel(0, 0) == 0
    assert buf.pixel(1, 0) == 64  # 63.75
    assert buf.pixel(1, 1) == 128  # 127.5
    assert buf.pixel(2, 2) == 255


def test_degenerate_gradients_are_black(patterns):
    assert patterns.gradient_diagonal(1, 1).pixel(0, 0) == 0
    assert not patterns.gradient_horizontal(1, 4).samples.any()


def test_radial_gradient_and_alpha_are_complementary(patterns):
    grad = patterns.gradient_radial(3, 3)
    alpha = patterns.alpha_radial(3, 3)
    assert grad.pixel(1, 1) == 255
    assert alpha.pixel(1, 1) == 0
    assert grad.pixel(0, 0) == 0
    assert alpha.pixel(2, 2) == 255
    t = 1 / math.sqrt(2)
    assert grad.pixel(1, 0) == _round_half_up(255 * (1 - t))
    assert alpha.pixel(1, 0) == _round_half_up(255 * t)


def test_radial_single_pixel(patterns):
    assert patterns.gradient_radial(1, 1).pixel(0, 0) == 255
    assert patterns.alpha_radial(1, 1).pixel(0, 0) == 0


def test_uniform_alpha(patterns):
    buf = patterns.uniform_alpha(4, 3)
    assert buf.size == (4, 3)
    assert set(buf.samples.tolist()) == {128}
    assert set(patterns.uniform_alpha(2, 2, value=7).samples.tolist()) == {7}


def test_uniform_alpha_rejects_out_of_range(patterns):
    with pytest.raises(ValueError):
        patterns.uniform_alpha(2, 2, value=300)


@pytest.mark.parametrize(
    "name", ["circle", "gradient_diagonal", "gradient_horizontal", "gradient_radial", "alpha_radial", "uniform_alpha"]
)
def test_generators_reject_non_positive_dimensions(patterns, name):
    with pytest.raises(ValueError):
        getattr(patterns, name)(0, 5)


def test_generators_are_deterministic(patterns):
    assert patterns.circle(64, 48) == patterns.circle(64, 48)
    assert patterns.alpha_radial(17, 9) == patterns.alpha_radial(17, 9)
