from __future__ import annotations

import os
from dotenv import load_dotenv
from pydantic import BaseModel

# Load environment variables from .env (if present)
load_dotenv()


class Settings(BaseModel):
    # Directory holding bookmarks-<page>.json, finders.json, settings.json, colors.json
    data_dir: str = os.getenv("DATA_DIR", "./data")

    # API key for this FastAPI server (sent via X-API-Key header)
    api_key: str = os.getenv("DASHBOARD_API_KEY", "")

    # CORS origins (comma-separated or "*")
    cors_origins: str = os.getenv("CORS_ORIGINS", "*")

    # Optional YAML file overriding the overlay labels
    labels_file: str = os.getenv("LABELS_FILE", "")

    # Maximum number of rows produced by fuzzy name search
    fuzzy_limit: int = int(os.getenv("FUZZY_LIMIT", "20"))

    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # HTML overlay rendering defaults
    css_theme: str = os.getenv("CSS_THEME", "dark")
    mobile_optimized: bool = os.getenv("MOBILE_OPTIMIZED", "1").strip() == "1"
    html_font_size: str = os.getenv("HTML_FONT_SIZE", "16px")
    html_max_width: str = os.getenv("HTML_MAX_WIDTH", "720px")


settings = Settings()
