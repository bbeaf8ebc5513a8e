"""Загрузка и сохранение изображений: источник/приёмник байтов поверх файлов.

Принципы:
- SRP: класс отвечает только за перемещение байтов и вызов кодека.
- OCP: источником может быть путь или любой бинарный файловый объект.
- Ошибки ввода-вывода (IoFailure) отделены от ошибок формата (DecodeError/EncodeError).
"""
from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import BinaryIO, Optional, Union

from graymix.models.errors import IoFailure
from graymix.models.image_model import GrayscaleBuffer, ImageData
from graymix.services.codec_service import CodecService

logger = logging.getLogger(__name__)

Source = Union[str, Path, BinaryIO]
Sink = Union[str, Path, BinaryIO]


def _is_stream(obj: object) -> bool:
    return hasattr(obj, "read") or hasattr(obj, "write")


class ImageService:
    def __init__(self, codec: Optional[CodecService] = None) -> None:
        self.codec = codec or CodecService()

    def read_bytes(self, source: Source) -> bytes:
        """Читает полный поток байтов из пути или файлового объекта.

        Raises:
            IoFailure: если источник не открывается или чтение обрывается.
        """
        if _is_stream(source):
            try:
                data = source.read()  # type: ignore[union-attr]
            except OSError as exc:
                raise IoFailure(f"Ошибка чтения потока: {exc}") from exc
            if not isinstance(data, (bytes, bytearray)):
                raise IoFailure("Источник вернул не байты")
            return bytes(data)

        path = Path(source)
        if not path.is_file():
            raise IoFailure(f"Файл не найден: {path}")
        try:
            return path.read_bytes()
        except OSError as exc:
            raise IoFailure(f"Не удалось прочитать файл {path}: {exc}") from exc

    def write_bytes(self, data: bytes, sink: Sink) -> None:
        """Записывает поток целиком.

        Для путей данные сначала пишутся во временный файл рядом с целевым и затем
        атомарно переносятся `os.replace`, поэтому частично записанный файл не остаётся.

        Raises:
            IoFailure: если приёмник недоступен или запись не удалась.
        """
        if _is_stream(sink):
            try:
                sink.write(data)  # type: ignore[union-attr]
                sink.flush()  # type: ignore[union-attr]
            except OSError as exc:
                raise IoFailure(f"Ошибка записи в поток: {exc}") from exc
            return

        path = Path(sink)
        tmp_name: Optional[str] = None
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as exc:
            raise IoFailure(f"Не удалось записать файл {path}: {exc}") from exc
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.remove(tmp_name)

    def load_image(self, source: Source) -> ImageData:
        """Загружает PNG и возвращает полутоновый буфер вместе с метаданными.

        Args:
            source: Путь до файла или бинарный файловый объект.

        Returns:
            `ImageData` с буфером, заголовком исходного PNG и размером потока.

        Raises:
            IoFailure: если источник недоступен.
            DecodeError: если поток не является корректным PNG.
        """
        data = self.read_bytes(source)
        buffer, header = self.codec.decode_with_header(data)
        path = None if _is_stream(source) else Path(source)
        logger.debug("Loaded %s (%s, %d-bit)", path or "<stream>", header.color_name, header.bit_depth)
        return ImageData(path=path, buffer=buffer, header=header, size_bytes=len(data))

    def save_image(self, buffer: GrayscaleBuffer, sink: Sink) -> None:
        # Кодируем до открытия приёмника: при EncodeError вывода нет вообще
        data = self.codec.encode(buffer)
        self.write_bytes(data, sink)
