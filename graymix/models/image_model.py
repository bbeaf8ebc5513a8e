"""Модели данных для полутоновых буферов.

Принципы:
- SRP: только структура данных и проверка инвариантов, без логики обработки.
- Чистый код: неизменяемость (`frozen=True`, read-only массив) для предсказуемости.
"""
from __future__ import annotations

import numbers
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import numpy as np


@dataclass(frozen=True, eq=False)
class GrayscaleBuffer:
    """Неизменяемый 8-битный полутоновый буфер.

    Fields:
        samples: Плоский массив `uint8` длины width*height (построчно, сверху вниз).
        width: Ширина, px.
        height: Высота, px.

    Буфер всегда полностью заполнен и не меняется после создания:
    входной массив копируется, копия помечается как read-only.
    """
    samples: np.ndarray
    width: int
    height: int

    def __post_init__(self) -> None:
        for name, value in (("width", self.width), ("height", self.height)):
            if not isinstance(value, numbers.Integral) or isinstance(value, bool):
                raise ValueError(f"{name} должна быть целым числом, получено: {value!r}")
        width, height = int(self.width), int(self.height)
        if width <= 0 or height <= 0:
            raise ValueError(f"Некорректные размеры буфера: {width}x{height}")

        raw = np.asarray(self.samples)
        if raw.dtype != np.uint8:
            if raw.size and (raw.min() < 0 or raw.max() > 255):
                raise ValueError("Значения отсчётов должны лежать в диапазоне [0, 255]")
        flat = np.array(raw, dtype=np.uint8).reshape(-1)
        if flat.size != width * height:
            raise ValueError(
                f"Число отсчётов {flat.size} не равно {width}x{height}={width * height}"
            )
        flat.setflags(write=False)

        object.__setattr__(self, "samples", flat)
        object.__setattr__(self, "width", width)
        object.__setattr__(self, "height", height)

    @classmethod
    def from_array(cls, arr: np.ndarray) -> "GrayscaleBuffer":
        """Создаёт буфер из двумерного массива формы (height, width)."""
        arr = np.asarray(arr)
        if arr.ndim != 2:
            raise ValueError(f"Ожидается двумерный массив, получено измерений: {arr.ndim}")
        height, width = arr.shape
        return cls(arr, width, height)

    @classmethod
    def filled(cls, width: int, height: int, value: int) -> "GrayscaleBuffer":
        if not 0 <= value <= 255:
            raise ValueError(f"Значение вне диапазона [0, 255]: {value}")
        return cls(np.full(width * height, value, dtype=np.uint8), width, height)

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def as_array(self) -> np.ndarray:
        """Read-only представление формы (height, width)."""
        return self.samples.reshape(self.height, self.width)

    def pixel(self, x: int, y: int) -> int:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Пиксель ({x}, {y}) вне буфера {self.width}x{self.height}")
        return int(self.samples[y * self.width + x])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GrayscaleBuffer):
            return NotImplemented
        return self.size == other.size and bool(np.array_equal(self.samples, other.samples))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"GrayscaleBuffer({self.width}x{self.height})"


# Буфер весов смешивания: та же структура, 0 = только A, 255 = только B.
AlphaBuffer = GrayscaleBuffer


@dataclass(frozen=True)
class PngHeader:
    """Поля заголовка IHDR исходного PNG.

    Fields:
        width: Ширина, px.
        height: Высота, px.
        bit_depth: Глубина 1/2/4/8/16.
        color_type: Тип цвета PNG (0, 2, 3, 4, 6).
        interlace: 0 — без чередования, 1 — Adam7.
    """
    width: int
    height: int
    bit_depth: int
    color_type: int
    interlace: int

    @property
    def color_name(self) -> str:
        return {0: "GRAY", 2: "RGB", 3: "PALETTE", 4: "GRAY+ALPHA", 6: "RGBA"}.get(
            self.color_type, f"type {self.color_type}"
        )


@dataclass(frozen=True)
class ImageData:
    """Загруженное изображение и его метаданные.

    Fields:
        path: Путь к исходному файлу (None для файловых объектов).
        buffer: Полутоновый буфер после декодирования.
        header: Заголовок исходного PNG.
        size_bytes: Размер закодированного потока, если доступен.
    """
    path: Optional[Path]
    buffer: GrayscaleBuffer
    header: PngHeader
    size_bytes: Optional[int]

    @property
    def width(self) -> int:
        return self.buffer.width

    @property
    def height(self) -> int:
        return self.buffer.height


@dataclass(frozen=True)
class SizeMismatch:
    """Диагностика несовпадения размеров (не является исключением).

    Fields:
        expected: Ожидаемый размер (w, h) — размер первого участника.
        actual: Пары (метка, (w, h)) для всех участников по порядку.
    """
    expected: Tuple[int, int]
    actual: Tuple[Tuple[str, Tuple[int, int]], ...]

    @property
    def offenders(self) -> Tuple[Tuple[str, Tuple[int, int]], ...]:
        return tuple((label, size) for label, size in self.actual if size != self.expected)

    def describe(self) -> str:
        lines = ["Error: image sizes aren't equal!"]
        for label, (w, h) in self.actual:
            lines.append(f"  {label}: {w}x{h}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.describe()
