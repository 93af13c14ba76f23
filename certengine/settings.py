"""Engine settings loaded from YAML."""

from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator


DEFAULT_CONFIG_PATH = Path(__file__).parent / "config" / "default.yaml"


class PlacementSettings(BaseModel):
    """Slot rules for placing unmatched data columns."""

    columns: List[float] = Field(default_factory=lambda: [20, 110])
    row_gap: float = 30            # mm below the lowest element
    top_mm: float = 50             # y used after wrapping to the top
    bottom_margin: float = 30      # vertical space kept free at the bottom
    min_bottom: float = 50         # floor for the "lowest bottom edge"
    field_width: float = 75
    field_font_size: float = 4


class EngineSettings(BaseModel):
    """Settings shared by the surface, exporter and batch controller."""

    raster_multiplier: float = 2.0
    min_zoom: float = 0.1
    debounce_ms: int = 300
    baseline_factor: float = 0.35
    line_height: float = 1.2
    filename_pattern: str = "certificate_{{index}}"
    file_extension: str = ".pdf"
    compress_pages: bool = True
    placement: PlacementSettings = Field(default_factory=PlacementSettings)
    synonyms: Dict[str, List[str]] = Field(default_factory=dict)

    @field_validator("raster_multiplier", "min_zoom")
    @classmethod
    def _positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be greater than zero")
        return value

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0


def _read_yaml(path: Path) -> dict:
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Settings file must contain a mapping: {path}")
    return data


def load_settings(path: Optional[str] = None) -> EngineSettings:
    """
    Load engine settings.

    The packaged defaults are always read first; a user file, when given,
    overrides them key by key (nested ``placement`` keys included).

    Args:
        path: Optional path to a YAML settings file

    Returns:
        Validated EngineSettings
    """
    data = _read_yaml(DEFAULT_CONFIG_PATH)

    if path:
        overrides = _read_yaml(Path(path))
        placement = {**data.get("placement", {}), **overrides.pop("placement", {})}
        data.update(overrides)
        data["placement"] = placement

    return EngineSettings.model_validate(data)


@lru_cache(maxsize=1)
def get_settings() -> EngineSettings:
    """Return the cached packaged defaults."""
    return load_settings()
