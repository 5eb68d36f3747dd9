"""
Centralized settings and path configuration for the retail pricing package.
"""
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional

from ..engine.rule_set import RuleSet, DEFAULT_RULE_SET, load_rule_set
from ..utils.logger import get_log_level


RULE_SET_ENV = "RETAIL_PRICING_RULE_SET"


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 4 levels up from this file (src/retail_pricing/config/settings.py)
    return Path(__file__).resolve().parent.parent.parent.parent


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path

    # Batch pricing files
    catalog_input: Path
    priced_output: Path
    pricing_report: Path

    # Active rule set (built-in v1.1 unless RETAIL_PRICING_RULE_SET points at a file)
    rule_set: RuleSet
    rule_set_file: Optional[Path] = None

    log_level: str = "INFO"

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> 'Settings':
        """Load settings from the project structure and environment."""
        root = project_root or get_project_root()

        rule_set = DEFAULT_RULE_SET
        rule_set_file = None
        configured = os.environ.get(RULE_SET_ENV, "").strip()
        if configured:
            rule_set_file = Path(configured).expanduser()
            if not rule_set_file.is_absolute():
                rule_set_file = root / rule_set_file
            if not rule_set_file.exists():
                raise FileNotFoundError(
                    f"Rule set file not found at {rule_set_file} ({RULE_SET_ENV})."
                )
            rule_set = load_rule_set(rule_set_file)

        return cls(
            project_root=root,
            catalog_input=root / 'data' / 'catalog.csv',
            priced_output=root / 'data' / 'outputs' / 'priced_catalog.csv',
            pricing_report=root / 'data' / 'outputs' / 'pricing_report.json',
            rule_set=rule_set,
            rule_set_file=rule_set_file,
            log_level=get_log_level(),
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reset_settings():
    """Drop the cached settings so the next get_settings() reloads them."""
    global _settings
    _settings = None
