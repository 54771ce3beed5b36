#!/usr/bin/env python3
from dataclasses import dataclass
import os
from typing import Optional
from dotenv import load_dotenv

load_dotenv()

@dataclass
class Config:
    """Application configuration"""
    site_url: str = os.getenv("DATAFORM_SITE_URL", "http://localhost")
    ws_token: Optional[str] = os.getenv("DATAFORM_WS_TOKEN") or None
    component: str = os.getenv("DATAFORM_COMPONENT", "mod_data")
    entries_per_page: int = int(os.getenv("DATAFORM_ENTRIES_PER_PAGE", "50"))
    http_timeout: float = float(os.getenv("DATAFORM_HTTP_TIMEOUT", "30"))
    strings_prefix: str = os.getenv("DATAFORM_STRINGS_PREFIX", "addon.mod_data.")
    enable_debug: bool = os.getenv("DATAFORM_DEBUG", "false").lower() in ["true", "1", "yes"]

    def __post_init__(self):
        self.site_url = self.site_url.rstrip("/")

config = Config()
