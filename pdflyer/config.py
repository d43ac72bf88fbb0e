"""
Editor configuration.

All tunable constants live on :class:`EditorConfig`. Overrides are read
from ``settings.json`` in the per-user config directory.
"""
import json
import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional, Tuple

from pdflyer.utils.resource_loader import get_config_dir

logger = logging.getLogger(__name__)

SETTINGS_FILE_NAME = "settings.json"


@dataclass(frozen=True)
class EditorConfig:
    """Configuration for the editor and the export pipeline."""

    # Width in display pixels every page preview is rendered at
    display_width: float = 800.0

    # Rasterisation scale of the flattened background layer
    export_scale: float = 2.0
    background_jpeg_quality: int = 80

    max_file_size: int = 100 * 1024 * 1024

    # Placement defaults (display space)
    default_position: Tuple[float, float] = (50.0, 50.0)
    max_placed_width: float = 200.0
    text_box_size: Tuple[float, float] = (200.0, 30.0)
    shape_size: Tuple[float, float] = (100.0, 100.0)
    redaction_size: Tuple[float, float] = (200.0, 50.0)
    min_element_size: float = 10.0

    default_font_size: float = 14.0
    default_text_color: str = "#000000"
    default_shape_color: str = "#FF0000"
    text_palette: Tuple[str, ...] = ("#000000", "#FF0000", "#00FF00", "#0000FF")

    drawing_stroke_width: float = 3.0
    signature_stroke_width: float = 2.0
    signature_pad_size: Tuple[int, int] = (600, 240)

    export_file_name: str = "edited_document.pdf"
    merge_file_name: str = "merged.pdf"
    signature_storage_key: str = "pdfSignatures"

    history_size: int = 50

    @classmethod
    def from_dict(cls, data: dict) -> "EditorConfig":
        """
        Create a configuration from a dictionary of overrides.

        Unknown keys are ignored with a warning. Lists are converted to
        tuples so the result stays hashable.
        """
        known = {f.name: f for f in fields(cls)}
        overrides = {}
        for key, value in data.items():
            if key not in known:
                logger.warning("Ignoring unknown setting %r", key)
                continue
            if isinstance(value, list):
                value = tuple(value)
            overrides[key] = value
        return replace(cls(), **overrides)


def load_config(path: Optional[Path] = None) -> EditorConfig:
    """
    Load the editor configuration.

    Args:
        path: Optional explicit settings file. Defaults to
            ``settings.json`` in the user config directory.

    Returns:
        The configuration with any overrides applied
    """
    if path is None:
        path = get_config_dir() / SETTINGS_FILE_NAME

    if not path.exists():
        return EditorConfig()

    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Could not read settings from %s: %s", path, e)
        return EditorConfig()

    if not isinstance(data, dict):
        logger.warning("Settings file %s does not contain an object", path)
        return EditorConfig()

    logger.info("Loaded settings from %s", path)
    return EditorConfig.from_dict(data)
