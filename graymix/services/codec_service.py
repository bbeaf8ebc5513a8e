"""Кодирование и декодирование PNG в канонический 8-битный полутоновый буфер.

Декодер принимает любой корректный PNG (типы цвета 0/2/3/4/6, глубина 1..16,
с tRNS или без) и сводит его к одному каналу:
- GRAY: отсчёт как есть.
- GRAY+ALPHA: 0 при alpha == 0, иначе яркость (частичная прозрачность игнорируется).
- RGB: (77*R + 150*G + 29*B + 128) >> 8.
- RGBA: 0 при alpha == 0, иначе яркость как для RGB.

Альфа работает как бинарный затвор, а не как премультипликация на фон.
Это известное отклонение от обычной обработки прозрачности, оно сохранено
ради совместимости результатов.

Кодер всегда пишет PNG: тип цвета 0, 8 бит, без чередования строк.
"""
from __future__ import annotations

import io
import logging
import struct
import zlib
from typing import Tuple

import numpy as np
import png
from PIL import Image, UnidentifiedImageError

from graymix.models.errors import DecodeError, EncodeError
from graymix.models.image_model import GrayscaleBuffer, PngHeader

logger = logging.getLogger(__name__)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

# Допустимые глубины для каждого типа цвета
_ALLOWED_DEPTHS = {
    0: (1, 2, 4, 8, 16),
    2: (8, 16),
    3: (1, 2, 4, 8),
    4: (8, 16),
    6: (8, 16),
}

LUMA_R = 77
LUMA_G = 150
LUMA_B = 29


def read_header(data: bytes) -> PngHeader:
    """Разбирает сигнатуру и IHDR без декодирования пикселей.

    Raises:
        DecodeError: если поток короче заголовка, сигнатура неверна,
            IHDR не первый или содержит недопустимые значения.
    """
    if len(data) < 8 + 8 + 13:
        raise DecodeError("Поток слишком короткий для PNG-заголовка")
    if data[:8] != PNG_SIGNATURE:
        raise DecodeError("Неверная сигнатура PNG")

    length, chunk_type = struct.unpack(">I4s", data[8:16])
    if chunk_type != b"IHDR" or length != 13:
        raise DecodeError("Первый чанк должен быть IHDR длиной 13 байт")

    width, height, bit_depth, color_type, _compression, _filter, interlace = struct.unpack(
        ">IIBBBBB", data[16:29]
    )
    if width == 0 or height == 0:
        raise DecodeError(f"Нулевые размеры в IHDR: {width}x{height}")
    if bit_depth not in _ALLOWED_DEPTHS.get(color_type, ()):
        raise DecodeError(f"Недопустимая пара тип цвета/глубина: {color_type}/{bit_depth}")
    if interlace not in (0, 1):
        raise DecodeError(f"Неизвестный метод чередования: {interlace}")

    return PngHeader(
        width=width,
        height=height,
        bit_depth=bit_depth,
        color_type=color_type,
        interlace=interlace,
    )


def luma(r: np.ndarray, g: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Целочисленная яркость: веса 77/150/29 из 256, +128 для округления сдвигом."""
    r = np.asarray(r, dtype=np.int32)
    g = np.asarray(g, dtype=np.int32)
    b = np.asarray(b, dtype=np.int32)
    return ((LUMA_R * r + LUMA_G * g + LUMA_B * b + 128) >> 8).astype(np.uint8)


def reduce_channels(channels: np.ndarray) -> np.ndarray:
    """Сводит массив (h, w, c) с 8-битными каналами к одному каналу (h, w).

    Raises:
        DecodeError: если число каналов не 1..4.
    """
    channels = np.asarray(channels, dtype=np.uint8)
    if channels.ndim == 2:
        channels = channels[:, :, None]
    count = channels.shape[2]

    if count == 1:
        return channels[:, :, 0].copy()
    if count == 2:
        gray, alpha = channels[:, :, 0], channels[:, :, 1]
        return np.where(alpha == 0, 0, gray).astype(np.uint8)
    if count in (3, 4):
        out = luma(channels[:, :, 0], channels[:, :, 1], channels[:, :, 2])
        if count == 4:
            out = np.where(channels[:, :, 3] == 0, 0, out).astype(np.uint8)
        return out
    raise DecodeError(f"Неподдерживаемое число каналов: {count}")


def _key_alpha(matches: np.ndarray) -> np.ndarray:
    return np.where(matches, 0, 255).astype(np.uint8)


def _wide_keyed_rgb(data: bytes) -> np.ndarray:
    """16-битный RGB с цветовым ключом: ключ сравнивается по всем 16 битам.

    pypng превращает tRNS в альфа-канал до усечения, затем берётся старший байт.
    """
    width, height, rows, info = png.Reader(bytes=data).asDirect()
    wide = np.array([list(row) for row in rows], dtype=np.uint16)
    wide = wide.reshape(height, width, info["planes"])
    rgb = (wide[:, :, :3] >> 8).astype(np.uint8)
    if info["planes"] < 4:
        return rgb
    return np.dstack([rgb, _key_alpha(wide[:, :, 3] == 0)])


class CodecService:
    def __init__(self, compress_level: int = 6) -> None:
        self.compress_level = compress_level

    # ---------- Декодирование ----------
    def decode(self, data: bytes) -> GrayscaleBuffer:
        buffer, _header = self.decode_with_header(data)
        return buffer

    def decode_with_header(self, data: bytes) -> Tuple[GrayscaleBuffer, PngHeader]:
        """Декодирует PNG-поток в полутоновый буфер.

        Args:
            data: Полный PNG-поток.

        Returns:
            Пара (буфер, заголовок исходного PNG).

        Raises:
            DecodeError: повреждённый поток, обрыв данных, неподдерживаемая раскладка.
        """
        data = bytes(data)
        header = read_header(data)

        try:
            with Image.open(io.BytesIO(data), formats=["PNG"]) as im:
                im.load()
                channels = self._to_channels(im, header, data)
        except DecodeError:
            raise
        except (
            UnidentifiedImageError,
            Image.DecompressionBombError,
            png.Error,
            OSError,
            SyntaxError,
            EOFError,
            ValueError,
            struct.error,
            zlib.error,
        ) as exc:
            raise DecodeError(f"Ошибка чтения PNG: {exc}") from exc

        gray = reduce_channels(channels)
        if gray.shape != (header.height, header.width):
            raise DecodeError(
                f"Размер декодированных данных {gray.shape[1]}x{gray.shape[0]} "
                f"не совпадает с IHDR {header.width}x{header.height}"
            )
        logger.debug(
            "Decoded %dx%d %s/%d-bit -> GRAY8",
            header.width, header.height, header.color_name, header.bit_depth,
        )
        return GrayscaleBuffer.from_array(gray), header

    def _to_channels(self, im: Image.Image, header: PngHeader, data: bytes) -> np.ndarray:
        """
        Нормализует изображение Pillow к GRAY, GRAY+ALPHA, RGB или RGBA по 8 бит.
        Цветовой ключ tRNS превращается в явный альфа-канал.
        """
        mode = im.mode
        transparency = im.info.get("transparency")

        if mode in ("P", "PA"):
            # палитра -> RGB, прозрачность палитры -> альфа
            target = "RGBA" if (transparency is not None or mode == "PA") else "RGB"
            return np.asarray(im.convert(target), dtype=np.uint8)

        if mode in ("1", "L"):
            # Pillow уже растянул 1/2/4 бита до 0..255, а ключ tRNS остался в исходной шкале
            gray = np.asarray(im.convert("L"), dtype=np.uint8)
            if isinstance(transparency, int):
                scale = 255 // ((1 << header.bit_depth) - 1) if header.bit_depth < 8 else 1
                alpha = _key_alpha(gray.astype(np.int32) == transparency * scale)
                return np.dstack([gray, alpha])
            return gray[:, :, None]

        if mode.startswith("I"):
            # 16-битный серый: сравнение с ключом на полной глубине, затем старший байт
            wide = np.asarray(im).astype(np.int64)
            gray = (wide >> 8).astype(np.uint8) if header.bit_depth == 16 else wide.astype(np.uint8)
            if isinstance(transparency, int):
                return np.dstack([gray, _key_alpha(wide == transparency)])
            return gray[:, :, None]

        if mode == "RGB":
            rgb = np.asarray(im, dtype=np.uint8)
            if isinstance(transparency, tuple) and len(transparency) == 3:
                if header.bit_depth == 16:
                    # Pillow отдаёт 16-битный RGB уже усечённым до старших байтов
                    return _wide_keyed_rgb(data)
                matches = np.all(rgb.astype(np.int32) == np.asarray(transparency, dtype=np.int32), axis=-1)
                return np.dstack([rgb, _key_alpha(matches)])
            return rgb

        if mode in ("LA", "RGBA"):
            return np.asarray(im, dtype=np.uint8)

        raise DecodeError(f"Неподдерживаемая раскладка каналов: {mode}")

    # ---------- Кодирование ----------
    def encode(self, buffer: GrayscaleBuffer) -> bytes:
        return self.encode_samples(buffer.samples, buffer.width, buffer.height)

    def encode_samples(self, samples: np.ndarray, width: int, height: int) -> bytes:
        """Сериализует 8-битные отсчёты в PNG (серый, 8 бит, без чередования).

        Raises:
            EncodeError: если размеры не положительны или число отсчётов не равно width*height.
        """
        if width <= 0 or height <= 0:
            raise EncodeError(f"Некорректные размеры: {width}x{height}")
        arr = np.asarray(samples)
        if arr.size != width * height:
            raise EncodeError(f"Число отсчётов {arr.size} не равно {width}x{height}")

        raw = np.ascontiguousarray(arr, dtype=np.uint8).tobytes()
        out = io.BytesIO()
        try:
            image = Image.frombytes("L", (width, height), raw)
            image.save(out, format="PNG", compress_level=self.compress_level)
        except (OSError, ValueError) as exc:
            raise EncodeError(f"Ошибка записи PNG: {exc}") from exc

        logger.debug("Encoded %dx%d GRAY8 -> %d bytes", width, height, out.tell())
        return out.getvalue()
