"""Точка входа: командная строка graymix."""
from __future__ import annotations

import argparse
import logging
import os
from typing import List, Optional

from graymix.config import load_config
from graymix.controllers.task_controller import TaskController
from graymix.log import setup_logging
from graymix.models.errors import GrayMixError


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="graymix", description="Grayscale PNG masking and alpha blending")
    p.add_argument("--config", default=None, help="YAML config (defaults are used when missing)")
    p.add_argument(
        "--log-level",
        default=None,
        help="CRITICAL|ERROR|WARNING|INFO|DEBUG (or env GRAYMIX_LOG_LEVEL)",
    )
    p.add_argument("--output-dir", default=None, help="Directory for written PNG files")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("circle", help="Generate the halftone circle and read it back")

    p_mask = sub.add_parser("mask", help="Apply the circular mask to PNG files")
    p_mask.add_argument("inputs", nargs="*", help="Input PNGs (default: mask.inputs from config)")

    sub.add_parser("blend-synthetic", help="Blend three synthetic pairs through the radial alpha")

    p_blend = sub.add_parser("blend-files", help="Blend PNG files pairwise with a uniform alpha")
    p_blend.add_argument("inputs", nargs="*", help="Input PNGs (default: blend.inputs from config)")
    p_blend.add_argument("--alpha", type=int, default=None, help="Uniform alpha value 0..255")

    sub.add_parser("all", help="Run every task in order: mask, circle, blend-synthetic, blend-files")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    """Разбирает аргументы, выполняет задачу и возвращает код завершения."""
    args = build_parser().parse_args(argv)

    log = logging.getLogger("graymix")
    try:
        cfg = load_config(args.config)
    except GrayMixError as exc:
        setup_logging(args.log_level)
        log.error("%s", exc)
        return 1

    setup_logging(args.log_level or os.environ.get("GRAYMIX_LOG_LEVEL") or cfg.get("log_level"))
    if args.output_dir is not None:
        cfg["output_dir"] = args.output_dir
    if getattr(args, "alpha", None) is not None:
        if not 0 <= args.alpha <= 255:
            log.error("--alpha должен быть в [0, 255], получено: %d", args.alpha)
            return 1
        cfg["blend"]["alpha_value"] = args.alpha

    controller = TaskController.from_config(cfg)
    try:
        if args.cmd == "circle":
            written = controller.halftone_circle()
        elif args.cmd == "mask":
            written = controller.circle_mask(args.inputs or None)
        elif args.cmd == "blend-synthetic":
            written = controller.blend_synthetic()
        elif args.cmd == "blend-files":
            written = controller.blend_files(args.inputs or None)
        else:
            written = controller.run_all()
    except GrayMixError as exc:
        log.error("Error: %s", exc)
        return 1

    log.info("Done, files written: %d", len(written))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
