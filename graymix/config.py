"""Загрузка конфигурации (YAML поверх встроенных значений по умолчанию)."""
from __future__ import annotations

import copy
from pathlib import Path
from typing import Any

import yaml

from graymix.models.errors import ConfigError

# Значения по умолчанию — используются для ключей, которых нет в файле
_DEFAULTS: dict[str, Any] = {
    "width": 512,
    "height": 512,
    "input_dir": ".",
    "output_dir": ".",
    "log_level": "INFO",
    "png": {
        "compress_level": 6,
    },
    "mask": {
        "inputs": ["image1.png", "image2.png", "image3.png"],
        "outputs": ["output_image1.png", "output_image2.png", "output_image3.png"],
    },
    "blend": {
        "alpha_value": 128,
        "inputs": [
            "image1_for_blending.png",
            "image2_for_blending.png",
            "image3_for_blending.png",
        ],
        "outputs": [
            "output_image1_for_blending.png",
            "output_image2_for_blending.png",
            "output_image3_for_blending.png",
        ],
    },
}


def default_config() -> dict[str, Any]:
    return copy.deepcopy(_DEFAULTS)


def _deep_merge(base: dict, override: dict) -> dict:
    """Рекурсивно накладывает override на base, не меняя аргументы."""
    result = copy.deepcopy(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def load_config(path: str | Path | None = None) -> dict[str, Any]:
    """Читает YAML-конфиг и возвращает словарь с заполненными значениями по умолчанию.

    Если путь не задан или файла нет, возвращаются значения по умолчанию.

    Raises:
        ConfigError: файл не читается, не является YAML или корень не словарь.
    """
    if path is None:
        return default_config()
    cfg_path = Path(path).expanduser()
    if not cfg_path.exists():
        return default_config()

    try:
        user_config = yaml.safe_load(cfg_path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Не удалось прочитать конфиг {cfg_path}: {exc}") from exc
    if not isinstance(user_config, dict):
        raise ConfigError(f"Корень конфига {cfg_path} должен быть словарём")

    cfg = _deep_merge(_DEFAULTS, user_config)
    _validate(cfg)
    return cfg


def _is_int(value: Any) -> bool:
    # bool — подкласс int, но в конфиге это ошибка
    return isinstance(value, int) and not isinstance(value, bool)


def _validate(cfg: dict[str, Any]) -> None:
    for key in ("width", "height"):
        value = cfg.get(key)
        if not _is_int(value) or value <= 0:
            raise ConfigError(f"'{key}' должен быть положительным целым, получено: {value!r}")
    for section in ("png", "mask", "blend"):
        if not isinstance(cfg.get(section), dict):
            raise ConfigError(f"'{section}' должен быть словарём, получено: {cfg.get(section)!r}")

    alpha = cfg["blend"].get("alpha_value")
    if not _is_int(alpha) or not 0 <= alpha <= 255:
        raise ConfigError(f"'blend.alpha_value' должен быть в [0, 255], получено: {alpha!r}")
    level = cfg["png"].get("compress_level")
    if not _is_int(level) or not 0 <= level <= 9:
        raise ConfigError(f"'png.compress_level' должен быть в [0, 9], получено: {level!r}")

    for section in ("mask", "blend"):
        for key in ("inputs", "outputs"):
            names = cfg[section].get(key)
            if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
                raise ConfigError(f"'{section}.{key}' должен быть списком имён файлов, получено: {names!r}")
        if len(cfg[section]["inputs"]) != len(cfg[section]["outputs"]):
            raise ConfigError(f"'{section}': число входов и выходов должно совпадать")
