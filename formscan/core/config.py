"""Application configuration using pydantic-settings."""
import re
from pathlib import Path

import yaml
from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TypeRule(BaseModel):
    """Label pattern that relabels an otherwise plain text control."""

    pattern: str
    type: str

    @field_validator("pattern")
    @classmethod
    def _check_pattern(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"Invalid type rule pattern {value!r}: {e}") from e
        return value

    def compile(self) -> re.Pattern:
        return re.compile(self.pattern, re.IGNORECASE)


DEFAULT_TYPE_RULES: list[TypeRule] = [
    TypeRule(pattern=r"e-?mail", type="email"),
    TypeRule(pattern=r"phone|mobile|telephone|\bcell\b", type="tel"),
    TypeRule(pattern=r"date of birth|\bdob\b|\bdate\b", type="date"),
    TypeRule(pattern=r"how many|number of|years of experience", type="number"),
]

DEFAULT_CONTROL_SELECTORS: list[str] = [
    "input:not([type])",
    'input[type="text"]',
    'input[type="email"]',
    'input[type="number"]',
    'input[type="tel"]',
    'input[type="url"]',
    'input[type="date"]',
    'input[type="password"]',
    'input[type="file"]',
    'input[type="radio"]',
    'input[type="checkbox"]',
    "select",
    "textarea",
    '[role="spinbutton"]',
]


class ExtractorConfig(BaseModel):
    """Field extraction configuration."""

    control_selectors: list[str] = DEFAULT_CONTROL_SELECTORS
    wrapper_selectors: list[str] = [
        ".field",
        ".form-field",
        ".form-group",
        ".application-question",
        ".input-wrapper",
        "fieldset",
    ]
    # a match here groups its spinbuttons only when it holds two or more
    date_container_selectors: list[str] = ['[role="group"]', "fieldset"]
    date_field_selectors: list[str] = [".date-input", ".date-field"]
    required_marker: str = "*"
    visible_only: bool = False
    generate_fallback_ids: bool = True
    option_sentinels: list[str] = ["none"]
    type_rules: list[TypeRule] = DEFAULT_TYPE_RULES


class ClaudeConfig(BaseModel):
    """Claude API configuration."""

    model: str = "claude-sonnet-4-20250514"
    max_tokens: int = 4096


class FillConfig(BaseModel):
    """Batching and pricing for the fill step."""

    chunk_size: int = 25
    max_workers: int = 4
    input_price_per_mtok: float = 3.0
    output_price_per_mtok: float = 15.0


class BrowserConfig(BaseModel):
    """Browser connection configuration."""

    cdp_port: int = 9333
    timeout: int = 30000


class Settings(BaseSettings):
    """Application settings loaded from YAML or environment."""

    model_config = SettingsConfigDict(env_prefix="FORMSCAN_", env_nested_delimiter="__")

    extractor: ExtractorConfig = ExtractorConfig()
    claude: ClaudeConfig = ClaudeConfig()
    fill: FillConfig = FillConfig()
    browser: BrowserConfig = BrowserConfig()

    @classmethod
    def from_yaml(cls, path: Path) -> "Settings":
        """Load settings from a YAML file.

        Args:
            path: Path to the YAML configuration file.

        Returns:
            Settings instance with loaded configuration.
        """
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)
