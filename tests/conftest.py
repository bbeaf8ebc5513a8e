from __future__ import annotations

import io
import struct
import zlib

import pytest
from PIL import Image

from graymix.services.codec_service import CodecService, PNG_SIGNATURE


def _chunk(typ: bytes, data: bytes) -> bytes:
    crc = zlib.crc32(typ + data) & 0xFFFFFFFF
    return struct.pack(">I", len(data)) + typ + data + struct.pack(">I", crc)


def build_png(width, height, bit_depth, color_type, rows, trns=None, plte=None) -> bytes:
    """Minimal PNG writer: filter type 0 on every row, no interlace.

    `rows` are already packed scanline bytes (without the filter byte).
    """
    ihdr = struct.pack(">IIBBBBB", width, height, bit_depth, color_type, 0, 0, 0)
    out = PNG_SIGNATURE + _chunk(b"IHDR", ihdr)
    if plte is not None:
        out += _chunk(b"PLTE", plte)
    if trns is not None:
        out += _chunk(b"tRNS", trns)
    raw = b"".join(b"\x00" + row for row in rows)
    out += _chunk(b"IDAT", zlib.compress(raw))
    out += _chunk(b"IEND", b"")
    return out


@pytest.fixture
def raw_png():
    return build_png


@pytest.fixture
def pil_png():
    def _save(image: Image.Image, **kwargs) -> bytes:
        buf = io.BytesIO()
        image.save(buf, format="PNG", **kwargs)
        return buf.getvalue()

    return _save


@pytest.fixture
def codec() -> CodecService:
    return CodecService()
