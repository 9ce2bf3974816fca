"""
Configuration settings for the Audit Report Assistant.

All runtime settings come from environment variables (optionally loaded from
a .env file by main.py), never hardcoded at the call site.
"""
import os
from dataclasses import dataclass, field
from typing import Optional


def _optional_int(name: str) -> Optional[int]:
    value = os.getenv(name, "").strip()
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got: {value!r}")


@dataclass
class DataConfig:
    """Action data configuration."""
    # Default action table for the chat command (CSV, XLSX or JSON)
    actions_path: str = field(default_factory=lambda: os.getenv("ACTIONS_DATA_PATH", ""))
    # Year filter of the locally loaded data
    loaded_year: str = field(default_factory=lambda: os.getenv("LOADED_AUDIT_YEAR", "2024+"))


@dataclass
class ExportConfig:
    """Report export configuration."""
    output_dir: str = field(default_factory=lambda: os.getenv("REPORT_OUTPUT_DIR", ".outputs"))
    role: str = field(default_factory=lambda: os.getenv("EXPORT_ROLE", "all"))


@dataclass
class ChatConfig:
    """Chat reply configuration."""
    # Seed for reply selection; unset means a different reply each run
    reply_seed: Optional[int] = field(default_factory=lambda: _optional_int("REPLY_SEED"))
    # Turns kept in the in-memory chat session
    max_history: int = field(default_factory=lambda: int(os.getenv("CHAT_MAX_HISTORY", "20")))


@dataclass
class AppConfig:
    """Main application configuration."""
    data: DataConfig = field(default_factory=DataConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    chat: ChatConfig = field(default_factory=ChatConfig)

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))


def get_config() -> AppConfig:
    """Factory function to get application configuration."""
    return AppConfig()
