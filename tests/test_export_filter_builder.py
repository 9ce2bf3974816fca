"""
Unit tests for the export filter builder.

Tests cover:
- Query parameter generation
- Choosing backend field filters vs explicit action keys
- Descriptions used in log lines
"""
import pytest
from auditbot.core.report_parser import ParsedFilters
from auditbot.core.export_filter_builder import (
    ExportFilterParams,
    ExportFilterBuilder,
    get_export_filter_builder,
    is_specific_year,
)


class TestExportFilterParams:

    def test_defaults_always_sent(self):
        params = ExportFilterParams()
        assert params.to_query_params() == {"auditYear": "2024+", "role": "all"}
        assert not params.has_filters()
        assert params.uses_backend_filtering()

    def test_field_filters(self):
        params = ExportFilterParams(
            audit_year="2023",
            status_filter="Open",
            audit_filter="Cyber Security",
            risk_level_filter="High",
            responsible_filter="jane.doe@corp.com",
        )
        assert params.to_query_params() == {
            "auditYear": "2023",
            "role": "all",
            "statusFilter": "Open",
            "auditFilter": "Cyber Security",
            "riskLevelFilter": "High",
            "responsibleFilter": "jane.doe@corp.com",
        }

    def test_action_keys_joined(self):
        params = ExportFilterParams(action_keys=["A-1", "A-2"])
        assert params.to_query_params()["actionKeys"] == "A-1,A-2"
        assert params.has_filters()
        assert not params.uses_backend_filtering()

    def test_describe(self):
        params = ExportFilterParams(status_filter="Open", action_keys=["A-1", "A-2", "A-3"])
        assert params.describe() == "Audit year: 2024+; Status: Open; 3 selected actions"


class TestIsSpecificYear:

    @pytest.mark.parametrize("value,expected", [
        ("2023", True),
        ("2024", True),
        ("2024+", False),
        ("all", False),
        (None, False),
        ("", False),
    ])
    def test_values(self, value, expected):
        assert is_specific_year(value) is expected


class TestExportFilterBuilder:

    @pytest.fixture
    def builder(self):
        return ExportFilterBuilder(role="auditor", loaded_year="2024+")

    def test_other_year_uses_backend_filters(self, builder):
        filters = ParsedFilters(status="Open", risk_level="High", audit_name="IT", audit_year="2023")
        params = builder.build(filters, action_keys=["A-1"])
        assert builder.needs_backend_filtering(filters)
        assert params.action_keys == []
        assert params.to_query_params() == {
            "auditYear": "2023",
            "role": "auditor",
            "statusFilter": "Open",
            "auditFilter": "IT",
            "riskLevelFilter": "High",
        }

    def test_loaded_range_uses_action_keys(self, builder):
        params = builder.build(ParsedFilters(status="Open", audit_year="2024+"), action_keys=["A-1", "A-2"])
        assert params.to_query_params() == {
            "auditYear": "2024+",
            "role": "auditor",
            "actionKeys": "A-1,A-2",
        }

    def test_no_year_falls_back_to_loaded_year(self, builder):
        params = builder.build(ParsedFilters(risk_level="Low"), action_keys=["A-9"])
        assert params.audit_year == "2024+"
        assert params.status_filter is None

    def test_all_years_is_not_a_backend_year(self, builder):
        params = builder.build(ParsedFilters(audit_year="all"), action_keys=["A-1"])
        assert params.audit_year == "all"
        assert params.action_keys == ["A-1"]

    def test_loaded_specific_year_stays_local(self):
        builder = ExportFilterBuilder(loaded_year="2023")
        assert not builder.needs_backend_filtering(ParsedFilters(audit_year="2023"))

    def test_empty_keys_dropped(self, builder):
        params = builder.build(ParsedFilters(status="Open"), action_keys=["A-1", "", None])
        assert params.action_keys == ["A-1"]


class TestGetExportFilterBuilder:

    def test_explicit_role(self):
        builder = get_export_filter_builder(role="manager", loaded_year="2023")
        assert builder.role == "manager"
        assert builder.loaded_year == "2023"

    def test_role_from_settings(self, monkeypatch):
        monkeypatch.setenv("EXPORT_ROLE", "viewer")
        assert get_export_filter_builder().role == "viewer"
