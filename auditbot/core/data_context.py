"""
Data Context Loader

Loads and caches the action data dictionary: which table columns hold which
report field, and how raw status spellings map onto the canonical labels.

Update config/data_dictionary.yaml to change the mapping without touching code.
"""
import logging
from pathlib import Path
from typing import Dict, List, Any, Optional

import yaml

logger = logging.getLogger(__name__)

# Report fields in ParsedFilters order, plus the descriptive columns
REPORT_FIELDS = (
    "key",
    "description",
    "status",
    "risk_level",
    "audit_name",
    "audit_lead",
    "responsible_email",
    "c_level",
    "audit_year",
    "due_date",
)


def _get_config_dir() -> Path:
    """Get the config directory path."""
    # Try relative to this file
    project_root = Path(__file__).parent.parent.parent
    config_dir = project_root / "config"

    if config_dir.exists():
        return config_dir

    # Try current working directory
    cwd_config = Path.cwd() / "config"
    if cwd_config.exists():
        return cwd_config

    raise FileNotFoundError(f"Config directory not found. Tried: {config_dir}, {cwd_config}")


class DataContext:
    """
    Loads and provides access to the action data dictionary.

    Usage:
        context = DataContext()
        context.resolve_columns(["Action Key", "Status", "auditYear"])
        context.normalize_status("RISK ACCEPTED")   # "Risk Accepted"
    """

    def __init__(self, config_dir: Path = None):
        """
        Initialize the data context.

        Args:
            config_dir: Path to config directory (auto-detected if None)
        """
        self.config_dir = config_dir or _get_config_dir()
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self):
        """Load configuration from YAML file."""
        yaml_path = self.config_dir / "data_dictionary.yaml"

        if yaml_path.exists():
            try:
                with open(yaml_path, 'r', encoding='utf-8') as f:
                    self._config = yaml.safe_load(f) or {}
                logger.info(f"Loaded data dictionary from {yaml_path}")
            except (OSError, yaml.YAMLError) as e:
                logger.error(f"Failed to load data dictionary: {e}")
                self._config = self._get_fallback_config()
        else:
            logger.warning(f"Data dictionary not found at {yaml_path}. Using fallback.")
            self._config = self._get_fallback_config()

    def _get_fallback_config(self) -> Dict[str, Any]:
        """Return fallback configuration if YAML can't be loaded."""
        return {
            "columns": {
                "key": ["key", "action_key", "actionKey"],
                "description": ["description"],
                "status": ["status"],
                "risk_level": ["risk_level", "riskLevel"],
                "audit_name": ["audit_name", "auditName"],
                "audit_lead": ["audit_lead", "auditLead"],
                "responsible_email": ["responsible_email", "responsibleEmail"],
                "c_level": ["c_level", "cLevel"],
                "audit_year": ["audit_year", "auditYear"],
                "due_date": ["due_date", "dueDate"],
            },
            "status_aliases": {
                "COMPLETED": "Completed",
                "RISK ACCEPTED": "Risk Accepted",
            },
            "report_columns": list(REPORT_FIELDS),
        }

    # =========================================================================
    # COLUMNS
    # =========================================================================

    def get_column_aliases(self) -> Dict[str, List[str]]:
        """Logical field name -> accepted column names."""
        columns = self._config.get("columns") or self._get_fallback_config()["columns"]
        return {name: [str(a) for a in aliases] for name, aliases in columns.items()}

    def resolve_columns(self, columns: List[str]) -> Dict[str, str]:
        """
        Map the columns of a loaded table onto logical field names.

        Args:
            columns: Column names as they appear in the table

        Returns:
            Dict of actual column name -> logical field name, for recognized columns
        """
        lookup = {str(c).strip().lower(): c for c in columns}
        mapping = {}
        for field_name, aliases in self.get_column_aliases().items():
            for alias in aliases:
                actual = lookup.get(alias.strip().lower())
                if actual is not None and actual not in mapping:
                    mapping[actual] = field_name
                    break
        return mapping

    def get_report_columns(self) -> List[str]:
        """Logical columns of the Excel report, in order."""
        return list(self._config.get("report_columns") or REPORT_FIELDS)

    # =========================================================================
    # STATUS
    # =========================================================================

    def get_status_aliases(self) -> Dict[str, str]:
        aliases = self._config.get("status_aliases")
        if aliases is None:
            aliases = self._get_fallback_config()["status_aliases"]
        return {str(k): str(v) for k, v in aliases.items()}

    def normalize_status(self, raw_status: Any) -> Any:
        """Map a raw status spelling ("COMPLETED") to its label ("Completed")."""
        if not isinstance(raw_status, str):
            return raw_status
        return self.get_status_aliases().get(raw_status.strip(), raw_status)


# Singleton instance
_data_context: Optional[DataContext] = None


def get_data_context() -> DataContext:
    """Get the configured data context instance."""
    global _data_context
    if _data_context is None:
        _data_context = DataContext()
    return _data_context


def reset_data_context():
    """Reset the data context (useful for testing or reloading config)."""
    global _data_context
    _data_context = None
