"""
Action Data Layer

Loads an exported audit action table and applies parsed report filters to it.

- load_actions: CSV, XLSX or JSON -> DataFrame with logical column names and
  canonical status labels (per config/data_dictionary.yaml)
- available_options: unique non-empty values per field, for the parser's
  vocabulary validation
- ActionFilter.apply: exact-match field filters plus the audit year semantics
  ("2024+" keeps 2024 and later, "all" keeps everything, a specific year
  matches the first 4-digit year in the stored value)
"""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pandas as pd
import yaml

from auditbot.core.audit_year import year_filter_matches
from auditbot.core.data_context import DataContext, get_data_context
from auditbot.core.error_taxonomy import ReportAssistantError, ErrorCategory, ErrorSeverity
from auditbot.core.report_parser import ParsedFilters, FILTER_KEYS
from auditbot.core.vocabulary import AvailableOptions

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = (".csv", ".xlsx", ".xls", ".json")

# ParsedFilters attribute -> AvailableOptions attribute
OPTION_FIELDS = {
    "status": "statuses",
    "audit_name": "audit_names",
    "audit_lead": "audit_leads",
    "risk_level": "risk_levels",
    "responsible_email": "responsible_emails",
    "c_level": "c_levels",
}


@dataclass
class FilterResult:
    """Result of a filtering operation."""
    data: pd.DataFrame
    original_count: int
    filtered_count: int
    filters_applied: List[str] = field(default_factory=list)

    @property
    def filter_summary(self) -> str:
        return f"Filtered {self.original_count} -> {self.filtered_count} actions ({len(self.filters_applied)} filters)"

    @property
    def action_keys(self) -> List[str]:
        if "key" not in self.data.columns:
            return []
        return [str(k) for k in self.data["key"].dropna().tolist() if str(k).strip()]

    def to_records(self) -> List[Dict[str, Any]]:
        return self.data.to_dict(orient="records")


def _read_table(path: Path) -> pd.DataFrame:
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return pd.read_csv(path, dtype=str, keep_default_na=False)
    if suffix in (".xlsx", ".xls"):
        return pd.read_excel(path, dtype=str, keep_default_na=False)
    if suffix == ".json":
        return pd.read_json(path, dtype=False)
    raise ReportAssistantError(
        f"Unsupported action data format: {path.suffix}",
        category=ErrorCategory.DATA_FORMAT_ERROR,
        context={"path": str(path), "supported": list(SUPPORTED_SUFFIXES)},
    )


def prepare_actions(df: pd.DataFrame, data_context: DataContext = None) -> pd.DataFrame:
    """
    Rename recognized columns to logical field names and canonicalize statuses.

    Unrecognized columns are kept as they are.
    """
    data_context = data_context or get_data_context()
    df = df.rename(columns=data_context.resolve_columns(list(df.columns)))

    for column in df.columns:
        df[column] = df[column].map(lambda v: v.strip() if isinstance(v, str) else v)

    if "status" in df.columns:
        df["status"] = df["status"].map(data_context.normalize_status)

    return df


def load_actions(path: Union[str, Path], data_context: DataContext = None) -> pd.DataFrame:
    """
    Load an action table from disk.

    Args:
        path: CSV, XLSX or JSON file
        data_context: Column mapping (default data dictionary if None)

    Returns:
        DataFrame with logical column names

    Raises:
        ReportAssistantError: if the file is missing or cannot be read
    """
    path = Path(path)
    if not path.exists():
        raise ReportAssistantError(
            f"Action data file not found: {path}",
            category=ErrorCategory.DATA_FILE_NOT_FOUND,
            severity=ErrorSeverity.HIGH,
            context={"path": str(path)},
        )

    try:
        raw = _read_table(path)
    except ReportAssistantError:
        raise
    except (ValueError, OSError) as e:
        raise ReportAssistantError(
            f"Could not read action data from {path}: {e}",
            category=ErrorCategory.DATA_FORMAT_ERROR,
            context={"path": str(path)},
        ) from e

    df = prepare_actions(raw, data_context)
    logger.info(f"Loaded {len(df)} actions from {path}")
    return df


def _unique_values(series: pd.Series) -> List[str]:
    values = []
    seen = set()
    for value in series.dropna().tolist():
        text = str(value).strip()
        if text and text.lower() not in ("nan", "none") and text not in seen:
            seen.add(text)
            values.append(text)
    return sorted(values)


def available_options(df: pd.DataFrame) -> AvailableOptions:
    """
    Derive the parser vocabulary from the loaded actions.

    Fields whose column is missing get no list, so the parser accepts any
    candidate for them.
    """
    kwargs = {}
    for column, option in OPTION_FIELDS.items():
        if column in df.columns:
            kwargs[option] = _unique_values(df[column])
    return AvailableOptions(**kwargs)


class ActionFilter:
    """
    Applies ParsedFilters to an action table.

    Usage:
        result = ActionFilter().apply(df, filters)
        result.filtered_count
    """

    def apply(self, df: pd.DataFrame, filters: ParsedFilters) -> FilterResult:
        """
        Filter actions.

        Field filters are exact matches on the logical column. A filter whose
        column is missing from the table matches nothing.
        """
        original_count = len(df)
        mask = pd.Series(True, index=df.index)
        applied = []

        for attr, key in FILTER_KEYS.items():
            value = getattr(filters, attr)
            if value is None:
                continue

            if attr == "audit_year":
                if "audit_year" in df.columns:
                    mask &= df["audit_year"].map(lambda raw: year_filter_matches(value, raw))
                elif value != "all":
                    mask &= False
                applied.append(f"{key}={value}")
                continue

            if attr in df.columns:
                mask &= df[attr].astype(str).str.strip() == value
            else:
                logger.warning(f"Column '{attr}' not in action data; filter {key}={value} matches nothing")
                mask &= False
            applied.append(f"{key}={value}")

        filtered = df[mask]
        result = FilterResult(
            data=filtered,
            original_count=original_count,
            filtered_count=len(filtered),
            filters_applied=applied,
        )
        logger.info(result.filter_summary)
        return result


def filter_actions(df: pd.DataFrame, filters: Union[ParsedFilters, Dict[str, Any]]) -> FilterResult:
    """Apply filters given as ParsedFilters or a camelCase mapping."""
    if not isinstance(filters, ParsedFilters):
        filters = ParsedFilters.from_dict(filters)
    return ActionFilter().apply(df, filters)


def load_available_options(path: Optional[Union[str, Path]]) -> AvailableOptions:
    """Load an AvailableOptions file (YAML or JSON mapping). None -> no lists."""
    if not path:
        return AvailableOptions()

    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ReportAssistantError(
            f"Could not read options file {path}: {e}",
            category=ErrorCategory.CONFIGURATION_ERROR,
            context={"path": str(path)},
        ) from e
    if not isinstance(data, dict):
        raise ReportAssistantError(
            f"Options file {path} must contain a mapping",
            category=ErrorCategory.CONFIGURATION_ERROR,
        )
    return AvailableOptions.from_dict(data)
