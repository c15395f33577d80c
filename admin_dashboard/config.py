#!/usr/bin/env python3
"""
Runtime configuration for the admin dashboard client
Values come from the environment (a local .env is loaded first)
"""

import os
import logging
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class Settings(BaseModel):
    api_base_url: str = ""
    request_timeout: float = Field(30.0, gt=0)
    token_key: str = "smartiAdminToken"
    login_path: str = "/login"
    state_dir: str = ".admin_dashboard"
    page_size: int = Field(10, ge=1)
    api_token: Optional[str] = None
    debug: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables"""
        return cls(
            api_base_url=os.getenv("ADMIN_API_BASE_URL", "").rstrip("/"),
            request_timeout=float(os.getenv("ADMIN_API_TIMEOUT", "30")),
            token_key=os.getenv("ADMIN_TOKEN_KEY", "smartiAdminToken"),
            login_path=os.getenv("ADMIN_LOGIN_PATH", "/login"),
            state_dir=os.getenv("ADMIN_STATE_DIR", ".admin_dashboard"),
            page_size=int(os.getenv("ADMIN_PAGE_SIZE", "10")),
            api_token=os.getenv("ADMIN_API_TOKEN") or None,
            debug=os.getenv("DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load .env once and return the process-wide settings"""
    load_dotenv()
    return Settings.from_env()


def configure_logging(settings: Settings) -> int:
    """Configure root logging with DEBUG support"""
    log_level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level, logging.INFO)

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if settings.debug:
        logger.debug("🐛 DEBUG mode enabled - verbose logging activated")
    else:
        logger.info(f"📊 Log level set to: {logging.getLevelName(log_level)}")
    return log_level
