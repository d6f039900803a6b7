from __future__ import annotations

from pathlib import Path
from typing import Dict

import yaml
from pydantic import BaseModel, ValidationError

from .logging_utils import setup_logger

logger = setup_logger("labels")


class Labels(BaseModel):
    """Preformatted user-visible strings consumed by the overlay and handlers."""

    no_matches: str = "No matches found"
    yes: str = "Yes"
    no: str = "No"
    create_new_bookmark: str = "Create New Bookmark"
    configuration: str = "Configuration"
    color_customization: str = "Color Customization"
    light_theme: str = "Light"
    dark_theme: str = "Dark"
    font_sizes: Dict[str, str] = {
        "xs": "Extra Small",
        "s": "Small",
        "sm": "Small Medium",
        "m": "Medium",
        "lg": "Large Medium",
        "l": "Large",
        "xl": "Extra Large",
    }
    columns: Dict[str, str] = {
        "1": "1 Column",
        "2": "2 Columns",
        "3": "3 Columns",
        "4": "4 Columns",
        "5": "5 Columns",
        "6": "6 Columns",
    }


def load_labels(labels_file: Path | None) -> Labels:
    """
    Read label overrides from a YAML mapping.

    Returns the defaults when the file is missing, empty or not a mapping.
    Keys the model doesn't know are ignored; nested maps (font_sizes,
    columns) are merged over the defaults so partial translations work.
    """
    defaults = Labels()
    if labels_file is None or not labels_file.exists():
        return defaults

    try:
        data = yaml.safe_load(labels_file.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"⚠️ Could not read labels file {labels_file}: {e}")
        return defaults

    if not isinstance(data, dict):
        return defaults

    merged = defaults.model_dump()
    for key, value in data.items():
        if key not in merged:
            continue
        if isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key].update({str(k): str(v) for k, v in value.items()})
        else:
            merged[key] = value

    try:
        return Labels(**merged)
    except ValidationError as e:
        logger.warning(f"⚠️ Ignoring invalid labels in {labels_file}: {e}")
        return defaults
