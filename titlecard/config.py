"""Scan and OCR settings, with optional overrides from a JSON file."""

import json
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

# Model artifacts live next to the installed package
DEFAULT_MODEL_DIR = Path(__file__).parent / "models"


@dataclass(frozen=True)
class ScanConfig:
    """Sampling policy and color thresholds for the title card scan.

    Defaults are tuned to the reference media (roughly 30 fps, title card
    shown after the first ~30 seconds, solid blue background).
    """

    warmup: int = 900
    stride: int = 30
    blue_min: int = 230
    red_max: int = 180
    green_max: int = 235
    min_fraction: float = 0.8

    def __post_init__(self):
        if self.stride <= 0:
            raise ValueError(f"stride must be positive, got {self.stride}")
        if not 0.0 <= self.min_fraction <= 1.0:
            raise ValueError(f"min_fraction must be within 0.0-1.0, got {self.min_fraction}")


@dataclass(frozen=True)
class OcrConfig:
    """Settings for the EasyOCR reader."""

    languages: List[str] = field(default_factory=lambda: ["en"])
    gpu: Optional[bool] = None  # None = auto-detect
    min_confidence: float = 0.3
    model_dir: Path = DEFAULT_MODEL_DIR
    download_enabled: bool = True


DEFAULT_SCAN_CONFIG = ScanConfig()


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


# JSON value checks per annotated field type
_TYPE_CHECKS = {
    int: (_is_int, "an integer"),
    float: (lambda v: _is_int(v) or isinstance(v, float), "a number"),
    bool: (lambda v: isinstance(v, bool), "true or false"),
    Optional[bool]: (lambda v: v is None or isinstance(v, bool), "true, false or null"),
    List[str]: (lambda v: isinstance(v, list) and all(isinstance(s, str) for s in v), "a list of strings"),
    Path: (lambda v: isinstance(v, str), "a path string"),
}


def _apply_overrides(config, overrides: Dict[str, Any], section: str):
    if not isinstance(overrides, dict):
        raise ValueError(f"\"{section}\" settings must be a JSON object, got {type(overrides).__name__}")
    types = {f.name: f.type for f in fields(config)}
    unknown = set(overrides) - set(types)
    if unknown:
        raise ValueError(f"Unknown {section} setting(s): {', '.join(sorted(unknown))}")
    for name, value in overrides.items():
        check, expected = _TYPE_CHECKS[types[name]]
        if not check(value):
            raise ValueError(f"{section}.{name} must be {expected}, got {value!r}")
    if "model_dir" in overrides:
        overrides = dict(overrides, model_dir=Path(overrides["model_dir"]).expanduser())
    return replace(config, **overrides)


def load_config(path: Path) -> Tuple[ScanConfig, OcrConfig]:
    """
    Load scan and OCR settings from a JSON file.

    The file may contain a "scan" object and/or an "ocr" object whose keys
    are field names of ScanConfig / OcrConfig. Missing keys keep defaults.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the JSON is invalid, or contains unknown settings or
            values of the wrong type
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a JSON object")

    scan_config = _apply_overrides(ScanConfig(), data.get("scan", {}), "scan")
    ocr_config = _apply_overrides(OcrConfig(), data.get("ocr", {}), "ocr")
    return scan_config, ocr_config
