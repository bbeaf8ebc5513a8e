from __future__ import annotations

import logging
import os
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List

from rich.logging import RichHandler

_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}

# PngImagePlugin пишет в DEBUG каждый чанк, в нашем выводе это шум
_NOISY_LOGGERS = ("PIL",)


def setup_logging(level: str | None = None) -> None:
    """Настраивает вывод логов graymix в консоль через RichHandler.

    Уровень (первое найденное):
      1) аргумент `level`
      2) переменная окружения `GRAYMIX_LOG_LEVEL`
      3) "INFO"

    Неизвестный уровень заменяется на INFO. Повторный вызов заменяет
    обработчики корневого логгера, а не добавляет новые.
    """
    if level is None:
        level = os.environ.get("GRAYMIX_LOG_LEVEL", "INFO")

    level = str(level).upper().strip()
    if level not in _LEVELS:
        level = "INFO"

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%H:%M:%S]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, root.level))


@contextmanager
def task_timer(task: str, logger: logging.Logger | None = None) -> Iterator[List[Path]]:
    """Замеряет задачу контроллера и пишет итог в лог.

    Блок получает список, куда задача складывает записанные файлы;
    по выходе в лог попадают длительность и число файлов.
    Исключение из блока логируется и пробрасывается дальше.
    """
    log = logger or logging.getLogger("graymix")
    written: List[Path] = []
    t0 = time.perf_counter()
    log.info("Task '%s' started", task)
    try:
        yield written
    except Exception as exc:
        log.error("Task '%s' failed after %.2f s: %s", task, time.perf_counter() - t0, exc)
        raise
    log.info("Task '%s' done in %.2f s, files written: %d", task, time.perf_counter() - t0, len(written))
