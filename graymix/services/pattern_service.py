"""Синтетические тестовые изображения и альфа-маски.

Каждый генератор — чистая функция (w, h) -> GrayscaleBuffer. Округление везде
одно и то же: половина от нуля (floor(v + 0.5) для неотрицательных v), затем
ограничение диапазоном [0, 255].
"""
from __future__ import annotations

from typing import Tuple

import numpy as np

from graymix.models.image_model import AlphaBuffer, GrayscaleBuffer

CIRCLE_RADIUS_RATIO = 0.45
DEFAULT_UNIFORM_ALPHA = 128


def require_positive(w: int, h: int) -> None:
    if w <= 0 or h <= 0:
        raise ValueError(f"Размеры должны быть положительными: {w}x{h}")


def round_to_u8(values: np.ndarray) -> np.ndarray:
    """Округляет неотрицательные значения половиной от нуля и приводит к uint8."""
    return np.clip(np.floor(np.asarray(values, dtype=np.float64) + 0.5), 0, 255).astype(np.uint8)


def cosine_profile(t):
    """Профиль яркости круга: 1 в центре (t=0), 0 на границе (t=1)."""
    return np.maximum(0.0, np.cos(np.asarray(t, dtype=np.float64) * np.pi * 0.5))


def center_distances(w: int, h: int) -> Tuple[np.ndarray, float, float]:
    """Расстояния от центра ((w-1)/2, (h-1)/2) до каждого пикселя, форма (h, w)."""
    cx = (w - 1) * 0.5
    cy = (h - 1) * 0.5
    ys, xs = np.mgrid[0:h, 0:w].astype(np.float64)
    return np.hypot(xs - cx, ys - cy), cx, cy


class PatternService:
    def circle(self, w: int, h: int) -> GrayscaleBuffer:
        """
        Круглый полутоновый объект: косинусоидальный спад яркости от центра к краю.
        Радиус — 45% от меньшей стороны, за пределами круга чёрный фон.
        """
        require_positive(w, h)
        dist, _cx, _cy = center_distances(w, h)
        r = min(w, h) * CIRCLE_RADIUS_RATIO
        t = dist / r
        out = np.where(t <= 1.0, round_to_u8(255.0 * cosine_profile(t)), 0).astype(np.uint8)
        return GrayscaleBuffer.from_array(out)

    def gradient_diagonal(self, w: int, h: int) -> GrayscaleBuffer:
        """
        Диагональный градиент (x + y) / ((w-1) + (h-1)).
        Для 1x1 знаменатель нулевой — единственный отсчёт равен 0.
        """
        require_positive(w, h)
        denom = (w - 1) + (h - 1)
        if denom == 0:
            return GrayscaleBuffer.from_array(np.zeros((h, w), dtype=np.uint8))
        ys, xs = np.mgrid[0:h, 0:w].astype(np.float64)
        return GrayscaleBuffer.from_array(round_to_u8(255.0 * (xs + ys) / denom))

    def gradient_horizontal(self, w: int, h: int) -> GrayscaleBuffer:
        """Горизонтальный градиент x / (w-1); при w == 1 все отсчёты 0."""
        require_positive(w, h)
        if w == 1:
            return GrayscaleBuffer.from_array(np.zeros((h, w), dtype=np.uint8))
        row = round_to_u8(255.0 * np.arange(w, dtype=np.float64) / (w - 1))
        return GrayscaleBuffer.from_array(np.tile(row, (h, 1)))

    def _radial_t(self, w: int, h: int) -> np.ndarray:
        require_positive(w, h)
        dist, cx, cy = center_distances(w, h)
        max_dist = float(np.hypot(cx, cy))  # расстояние до угла
        if max_dist == 0.0:
            return np.zeros((h, w), dtype=np.float64)
        return np.clip(dist / max_dist, 0.0, 1.0)

    def gradient_radial(self, w: int, h: int) -> GrayscaleBuffer:
        """Радиальный градиент: белый в центре, чёрный в углах."""
        return GrayscaleBuffer.from_array(round_to_u8(255.0 * (1.0 - self._radial_t(w, h))))

    def alpha_radial(self, w: int, h: int) -> AlphaBuffer:
        """Радиальная альфа-маска: 0 в центре (видно A), 255 в углах (видно B)."""
        return GrayscaleBuffer.from_array(round_to_u8(255.0 * self._radial_t(w, h)))

    def uniform_alpha(self, w: int, h: int, value: int = DEFAULT_UNIFORM_ALPHA) -> AlphaBuffer:
        # 128 = 50% смешивание
        return GrayscaleBuffer.filled(w, h, value)
