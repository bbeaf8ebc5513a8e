"""Контроллер задач: оркестрация генераторов, кодека и композитора.

SOLID:
- SRP: класс управляет последовательностью задач и путями файлов (без арифметики пикселей).
- DIP: зависит от сервисов как от ролей; конкретные реализации подставляются снаружи.
Clean Code:
- Каждая задача возвращает список записанных файлов; ошибки ввода-вывода и формата
  не перехватываются и доходят до вызывающего кода.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Sequence

from graymix.log import task_timer
from graymix.models.errors import ConfigError, IoFailure
from graymix.models.image_model import GrayscaleBuffer
from graymix.services.codec_service import CodecService
from graymix.services.compositor_service import CompositorService
from graymix.services.image_service import ImageService
from graymix.services.pattern_service import DEFAULT_UNIFORM_ALPHA, PatternService
from graymix.services.validation_service import check_equal

logger = logging.getLogger(__name__)


@dataclass
class TaskController:
    """Выполняет задачи над каталогом результатов.

    Ответственности:
    - Генерация синтетических изображений и альфа-масок.
    - Наложение круглой маски на файлы.
    - Смешивание синтетических пар и пар файлов с проверкой размеров.
    """
    output_dir: Path
    input_dir: Path = Path(".")
    width: int = 512
    height: int = 512
    alpha_value: int = DEFAULT_UNIFORM_ALPHA
    mask_inputs: Sequence[str] = ()
    mask_outputs: Sequence[str] = ()
    blend_inputs: Sequence[str] = ()
    blend_outputs: Sequence[str] = ()

    image_service: ImageService = field(default_factory=ImageService)
    patterns: PatternService = field(default_factory=PatternService)
    compositor: CompositorService = field(default_factory=CompositorService)

    @classmethod
    def from_config(cls, cfg: dict[str, Any]) -> "TaskController":
        codec = CodecService(compress_level=cfg["png"]["compress_level"])
        return cls(
            output_dir=Path(cfg["output_dir"]),
            input_dir=Path(cfg["input_dir"]),
            width=cfg["width"],
            height=cfg["height"],
            alpha_value=cfg["blend"]["alpha_value"],
            mask_inputs=list(cfg["mask"]["inputs"]),
            mask_outputs=list(cfg["mask"]["outputs"]),
            blend_inputs=list(cfg["blend"]["inputs"]),
            blend_outputs=list(cfg["blend"]["outputs"]),
            image_service=ImageService(codec),
        )

    # ---- Tasks ----
    def circle_mask(
        self, inputs: Optional[Sequence[str | Path]] = None, outputs: Optional[Sequence[str | Path]] = None
    ) -> List[Path]:
        """Накладывает круглую маску на каждый входной файл."""
        sources = self._inputs(inputs, self.mask_inputs)
        targets = self._outputs(outputs, () if inputs else self.mask_outputs, sources)
        with task_timer("circle mask", logger) as written:
            for src, dst in zip(sources, targets):
                logger.info("Applying circular mask to image: %s", src)
                image = self.image_service.load_image(src)
                logger.info("Read image: %dx%d (%s)", image.width, image.height, image.header.color_name)
                masked = self.compositor.apply_circular_mask(image.buffer)
                self._save(masked, dst)
                written.append(dst)
        return list(written)

    def halftone_circle(self) -> List[Path]:
        """Генерирует круглое полутоновое изображение и проверяет его обратным чтением."""
        with task_timer("halftone circle", logger) as written:
            path = self._save(self.patterns.circle(self.width, self.height), self._out("circle.png"))
            written.append(path)
            back = self.image_service.load_image(path)
            logger.info("Read back: %dx%d", back.width, back.height)
        return list(written)

    def blend_synthetic(self) -> List[Path]:
        """Смешивает три синтетические пары через общую радиальную альфа-маску."""
        w, h = self.width, self.height
        with task_timer("blend synthetic", logger) as written:
            alpha = self.patterns.alpha_radial(w, h)
            written.append(self._save(alpha, self._out("alpha.png")))

            pairs = [
                (self.patterns.gradient_diagonal, self.patterns.gradient_horizontal),
                (self.patterns.gradient_radial, self.patterns.circle),
                (self.patterns.gradient_horizontal, self.patterns.gradient_diagonal),
            ]
            for n, (make_a, make_b) in enumerate(pairs, start=1):
                logger.info("Processing pair %d", n)
                img_a, img_b = make_a(w, h), make_b(w, h)
                written.append(self._save(img_a, self._out(f"input_a{n}.png")))
                written.append(self._save(img_b, self._out(f"input_b{n}.png")))

                mismatch = check_equal(img_a, img_b, alpha)
                if mismatch is not None:
                    logger.error("%s", mismatch.describe())
                    continue
                blended = self.compositor.blend(img_a, img_b, alpha)
                written.append(self._save(blended, self._out(f"output_blended{n}.png")))
        return list(written)

    def blend_files(
        self, inputs: Optional[Sequence[str | Path]] = None, outputs: Optional[Sequence[str | Path]] = None
    ) -> List[Path]:
        """Смешивает файлы по кругу (1,2), (2,3), ..., (n,1) с равномерной альфой.

        При несовпадении размеров смешивание пропускается, ошибка пишется в лог.
        """
        sources = self._inputs(inputs, self.blend_inputs)
        if len(sources) < 2:
            raise ConfigError("Для смешивания нужно минимум два входных файла")
        targets = self._outputs(outputs, () if inputs else self.blend_outputs, sources)

        with task_timer("blend files", logger) as written:
            images = [self.image_service.load_image(src) for src in sources]
            buffers = [img.buffer for img in images]
            mismatch = check_equal(*buffers, labels=[p.name for p in sources])
            if mismatch is not None:
                logger.error("%s", mismatch.describe())
                return []

            alpha = self.patterns.uniform_alpha(buffers[0].width, buffers[0].height, self.alpha_value)
            for i, dst in enumerate(targets):
                a, b = buffers[i], buffers[(i + 1) % len(buffers)]
                written.append(self._save(self.compositor.blend(a, b, alpha), dst))
        return list(written)

    def run_all(self) -> List[Path]:
        written: List[Path] = []
        written += self.circle_mask()
        written += self.halftone_circle()
        written += self.blend_synthetic()
        written += self.blend_files()
        return written

    # ---- Helpers ----
    def _out(self, name: str | Path) -> Path:
        path = Path(name)
        return path if path.is_absolute() else self.output_dir / path

    def _inputs(self, explicit: Optional[Sequence[str | Path]], configured: Sequence[str]) -> List[Path]:
        names = explicit if explicit else configured
        result = []
        for name in names:
            path = Path(name)
            result.append(path if path.is_absolute() or explicit else self.input_dir / path)
        return result

    def _outputs(
        self,
        explicit: Optional[Sequence[str | Path]],
        configured: Sequence[str],
        sources: Sequence[Path],
    ) -> List[Path]:
        if explicit:
            names: Sequence[str | Path] = explicit
        elif configured:
            names = configured
        else:
            # явные входы без явных выходов: output_<имя входа>
            names = [f"output_{src.name}" for src in sources]
        if len(names) != len(sources):
            raise ConfigError(f"Входов {len(sources)}, а выходов {len(names)}")
        return [self._out(name) for name in names]

    def _save(self, buffer: GrayscaleBuffer, path: Path) -> Path:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise IoFailure(f"Не удалось создать каталог {path.parent}: {exc}") from exc
        self.image_service.save_image(buffer, path)
        logger.info("Saved: %s", path)
        return path
