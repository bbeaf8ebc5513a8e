"""Проверка совпадения размеров буферов перед совместной обработкой.

Результат — значение `SizeMismatch` или None; решение о фатальности
принимает вызывающий код.
"""
from __future__ import annotations

from typing import Optional, Sequence, Tuple

from graymix.models.image_model import GrayscaleBuffer, SizeMismatch

_DEFAULT_LABELS = ("Image A", "Image B", "Alpha")


def default_labels(count: int) -> Tuple[str, ...]:
    if count <= len(_DEFAULT_LABELS):
        return _DEFAULT_LABELS[:count]
    return tuple(f"Image {i + 1}" for i in range(count))


def check_sizes(
    *sizes: Tuple[int, int], labels: Optional[Sequence[str]] = None
) -> Optional[SizeMismatch]:
    """Сравнивает размеры (w, h) с размером первого участника."""
    if not sizes:
        raise ValueError("Нужен хотя бы один размер для проверки")
    labels = tuple(labels) if labels is not None else default_labels(len(sizes))
    if len(labels) != len(sizes):
        raise ValueError(f"Меток {len(labels)}, а размеров {len(sizes)}")

    normalized = tuple((int(w), int(h)) for w, h in sizes)
    expected = normalized[0]
    if all(size == expected for size in normalized):
        return None
    return SizeMismatch(expected=expected, actual=tuple(zip(labels, normalized)))


def check_equal(
    *buffers: GrayscaleBuffer, labels: Optional[Sequence[str]] = None
) -> Optional[SizeMismatch]:
    """Проверяет, что все буферы имеют одинаковые ширину и высоту.

    Returns:
        None, если размеры совпадают, иначе `SizeMismatch` с размерами всех участников.
    """
    return check_sizes(*(buf.size for buf in buffers), labels=labels)
