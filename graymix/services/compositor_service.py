from __future__ import annotations

import logging

import numpy as np

from graymix.models.errors import SizeMismatchError
from graymix.models.image_model import AlphaBuffer, GrayscaleBuffer
from graymix.services.pattern_service import CIRCLE_RADIUS_RATIO, center_distances, require_positive
from graymix.services.validation_service import check_equal

logger = logging.getLogger(__name__)


class CompositorService:
    def blend(self, a: GrayscaleBuffer, b: GrayscaleBuffer, alpha: AlphaBuffer) -> GrayscaleBuffer:
        """
        Альфа-смешивание: out = ((255 - alpha) * A + alpha * B + 127) // 255.
        alpha = 0 -> ровно A, alpha = 255 -> ровно B.
        +127 превращает усечение деления в округление к ближайшему.
        """
        mismatch = check_equal(a, b, alpha)
        if mismatch is not None:
            raise SizeMismatchError(mismatch)

        wa = alpha.samples.astype(np.int32)
        va = a.samples.astype(np.int32)
        vb = b.samples.astype(np.int32)
        out = ((255 - wa) * va + wa * vb + 127) // 255
        logger.debug("Blended %dx%d", a.width, a.height)
        return GrayscaleBuffer(out.astype(np.uint8), a.width, a.height)

    def circular_mask(self, w: int, h: int) -> GrayscaleBuffer:
        """
        Бинарная маска-круг: 255 внутри замкнутого диска (dist <= r), 0 снаружи.
        Центр и радиус те же, что у генератора круга.
        """
        require_positive(w, h)
        dist, _cx, _cy = center_distances(w, h)
        r = min(w, h) * CIRCLE_RADIUS_RATIO
        return GrayscaleBuffer.from_array(np.where(dist <= r, 255, 0).astype(np.uint8))

    def apply_circular_mask(self, image: GrayscaleBuffer) -> GrayscaleBuffer:
        """
        Умножение изображения на маску: out = image * mask // 255, без смещения.
        Снаружи диска ровно 0, внутри исходное значение. Повторное применение
        результат не меняет.
        """
        mask = self.circular_mask(image.width, image.height)
        out = (image.samples.astype(np.int32) * mask.samples.astype(np.int32)) // 255
        return GrayscaleBuffer(out.astype(np.uint8), image.width, image.height)
