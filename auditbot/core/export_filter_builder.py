"""
Export Filter Builder

Converts ParsedFilters into the query parameters of the action export
endpoint.

Two shapes are produced:
- Field filters (auditYear, statusFilter, auditFilter, ...) when a specific
  year outside the currently loaded data was requested. The backend does the
  filtering because the local table may not hold that year.
- Action keys otherwise. The caller has already filtered the loaded actions
  and sends the matching keys explicitly.
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from auditbot.core.audit_year import RANGE_TOKEN, ALL_YEARS_TOKEN
from auditbot.core.report_parser import ParsedFilters

logger = logging.getLogger(__name__)


@dataclass
class ExportFilterParams:
    """
    Container for the parameters sent to the export endpoint.

    audit_year and role are always sent. The field filters and action_keys
    are mutually exclusive in practice; to_query_params sends whatever is set.
    """
    audit_year: str = RANGE_TOKEN
    role: str = "all"
    status_filter: Optional[str] = None
    audit_filter: Optional[str] = None
    risk_level_filter: Optional[str] = None
    responsible_filter: Optional[str] = None
    action_keys: List[str] = None

    def __post_init__(self):
        if self.action_keys is None:
            self.action_keys = []

    def to_query_params(self) -> Dict[str, str]:
        """
        Convert to URL query parameters for the export endpoint.

        Returns:
            Dict of parameter name to value, ready for URL encoding
        """
        params = {
            "auditYear": self.audit_year,
            "role": self.role,
        }

        if self.status_filter:
            params["statusFilter"] = self.status_filter

        if self.audit_filter:
            params["auditFilter"] = self.audit_filter

        if self.risk_level_filter:
            params["riskLevelFilter"] = self.risk_level_filter

        if self.responsible_filter:
            params["responsibleFilter"] = self.responsible_filter

        if self.action_keys:
            params["actionKeys"] = ",".join(self.action_keys)

        return params

    def has_filters(self) -> bool:
        """Check if any field filter or action key is set."""
        return bool(
            self.status_filter or
            self.audit_filter or
            self.risk_level_filter or
            self.responsible_filter or
            self.action_keys
        )

    def uses_backend_filtering(self) -> bool:
        """True when the backend applies the field filters (no explicit keys)."""
        return not self.action_keys

    def describe(self) -> str:
        """Return human-readable description of filters."""
        parts = [f"Audit year: {self.audit_year}"]

        if self.status_filter:
            parts.append(f"Status: {self.status_filter}")

        if self.audit_filter:
            parts.append(f"Audit: {self.audit_filter}")

        if self.risk_level_filter:
            parts.append(f"Risk level: {self.risk_level_filter}")

        if self.responsible_filter:
            parts.append(f"Responsible: {self.responsible_filter}")

        if self.action_keys:
            parts.append(f"{len(self.action_keys)} selected actions")

        return "; ".join(parts)


def is_specific_year(audit_year: Optional[str]) -> bool:
    """A single year like "2023", as opposed to "2024+", "all" or nothing."""
    return bool(audit_year) and audit_year not in (RANGE_TOKEN, ALL_YEARS_TOKEN)


class ExportFilterBuilder:
    """
    Builds ExportFilterParams from parsed filters.

    Usage:
        builder = ExportFilterBuilder()
        params = builder.build(filters, action_keys=["A-1", "A-2"])
        params.to_query_params()
    """

    def __init__(self, role: str = "all", loaded_year: str = RANGE_TOKEN):
        """
        Initialize builder.

        Args:
            role: Role parameter sent with every export
            loaded_year: Year filter of the locally loaded action data
        """
        self.role = role
        self.loaded_year = loaded_year

    def needs_backend_filtering(self, filters: ParsedFilters) -> bool:
        """A specific year other than the loaded one can only be served by the backend."""
        return is_specific_year(filters.audit_year) and filters.audit_year != self.loaded_year

    def build(
        self,
        filters: ParsedFilters,
        action_keys: Optional[List[str]] = None,
    ) -> ExportFilterParams:
        """
        Build export parameters.

        Args:
            filters: Filters from the parser
            action_keys: Keys of the locally matched actions

        Returns:
            ExportFilterParams with either field filters or action keys
        """
        if self.needs_backend_filtering(filters):
            params = ExportFilterParams(
                audit_year=filters.audit_year,
                role=self.role,
                status_filter=filters.status,
                audit_filter=filters.audit_name,
                risk_level_filter=filters.risk_level,
                responsible_filter=filters.responsible_email,
            )
            logger.info(f"Export via backend filters: {params.describe()}")
            return params

        params = ExportFilterParams(
            audit_year=filters.audit_year or self.loaded_year,
            role=self.role,
            action_keys=[str(k) for k in (action_keys or []) if k],
        )
        logger.info(f"Export via action keys: {params.describe()}")
        return params


def get_export_filter_builder(role: Optional[str] = None, loaded_year: str = RANGE_TOKEN) -> ExportFilterBuilder:
    """Get an export filter builder configured from settings unless a role is given."""
    if role is None:
        from config.settings import get_config
        role = get_config().export.role
    return ExportFilterBuilder(role=role, loaded_year=loaded_year)
