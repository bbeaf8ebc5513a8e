"""Иерархия ошибок graymix.

IoFailure, DecodeError и EncodeError всегда фатальны для операции, которая их
выбросила. SizeMismatch сам по себе — диагностика; SizeMismatchError нужен
только там, где операция смешивания вызвана с несовместимыми буферами.
"""
from __future__ import annotations

from graymix.models.image_model import SizeMismatch


class GrayMixError(Exception):
    """Базовый класс всех ошибок приложения."""


class IoFailure(GrayMixError):
    """Источник/приёмник байтов недоступен или передача оборвалась."""


class DecodeError(GrayMixError):
    """Повреждённый или неподдерживаемый PNG-поток."""


class EncodeError(GrayMixError):
    """Некорректные размеры или число отсчётов при кодировании."""


class ConfigError(GrayMixError):
    """Файл конфигурации не читается или имеет неверную структуру."""


class SizeMismatchError(GrayMixError):
    def __init__(self, mismatch: SizeMismatch) -> None:
        super().__init__(mismatch.describe())
        self.mismatch = mismatch
