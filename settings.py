"""
Configuration management.

Settings come from environment variables, optionally seeded from a .env
file. Environment variables override .env values.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from accessibility_check import AccessibilityCheckPreset, CheckParameters, ColorSource
from check_results import SuppressionRule

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
_LOG_LEVELS = ('CRITICAL', 'ERROR', 'WARNING', 'INFO', 'DEBUG')


class Settings(BaseModel):
    """Defaults for a check run"""
    preset: AccessibilityCheckPreset = AccessibilityCheckPreset.LATEST
    log_level: str = "INFO"
    max_workers: int = Field(default=1, ge=1)
    touch_target_size_dp: Optional[int] = Field(default=None, gt=0)
    text_contrast_ratio: Optional[float] = Field(default=None, ge=1.0, le=21.0)
    suppressed_checks: List[str] = Field(default_factory=list)
    marked_output_dir: str = "./marked-output"

    @field_validator('preset', mode='before')
    @classmethod
    def _preset_by_name(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator('log_level')
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level {value!r}")
        return level

    def check_parameters(self, color_source: Optional[ColorSource] = None) -> CheckParameters:
        return CheckParameters(
            color_source=color_source,
            custom_touch_target_size=self.touch_target_size_dp,
            custom_text_contrast_ratio=self.text_contrast_ratio,
        )

    def suppression_rules(self) -> List[SuppressionRule]:
        return [SuppressionRule(check_id=check_id, reason="suppressed by configuration")
                for check_id in self.suppressed_checks]


def _optional_env(name: str) -> Optional[str]:
    value = os.getenv(name)
    return value if value else None


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """
    Load settings from a .env file and environment variables.

    Searches for a .env file at the provided path, then in the current
    directory.

    Raises:
        pydantic.ValidationError: if a variable holds an invalid value
    """
    if env_file and env_file.exists():
        load_dotenv(env_file)
    elif Path(".env").exists():
        load_dotenv(".env")

    suppress = os.getenv("A11Y_SUPPRESS", "")
    return Settings(
        preset=os.getenv("A11Y_PRESET", AccessibilityCheckPreset.LATEST.value),
        log_level=os.getenv("A11Y_LOG_LEVEL", "INFO"),
        max_workers=os.getenv("A11Y_MAX_WORKERS", "1"),
        touch_target_size_dp=_optional_env("A11Y_TOUCH_TARGET_SIZE_DP"),
        text_contrast_ratio=_optional_env("A11Y_TEXT_CONTRAST_RATIO"),
        suppressed_checks=[check_id.strip() for check_id in suppress.split(',')
                           if check_id.strip()],
        marked_output_dir=os.getenv("A11Y_MARKED_OUTPUT_DIR", "./marked-output"),
    )


def configure_logging(level: str = "INFO") -> None:
    """Process-wide logging setup, called once at startup"""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
