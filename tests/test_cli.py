"""
CLI Tests

Runs the parse command the way `python main.py parse ...` does and checks
the printed JSON, plus the chat loop's own history and reset commands.
"""

import argparse
import json

import pytest
import main
from auditbot.core.error_taxonomy import ErrorCategory, ReportAssistantError
from auditbot.core.memory import SessionManager
from auditbot.core.report_parser import ParsedFilters, ParseResult


def _run_parse(capsys, request, previous=None, options=None):
    main.cmd_parse(argparse.Namespace(request=request, previous=previous, options=options))
    return json.loads(capsys.readouterr().out)


class TestParseCommand:

    def test_prints_filters(self, capsys):
        output = _run_parse(capsys, "How many actions with Critical risk and Overdue status?")
        assert output == {
            "success": True,
            "filters": {"status": "Overdue", "riskLevel": "Critical"},
            "isCountRequest": True,
        }

    def test_previous_filters(self, capsys):
        output = _run_parse(capsys, "export them", previous='{"status": "Open", "auditYear": "2024"}')
        assert output["filters"] == {"status": "Open", "auditYear": "2024"}

    def test_options_file(self, capsys, tmp_path):
        path = tmp_path / "options.yaml"
        path.write_text("riskLevels: [High, Low]\n", encoding="utf-8")
        output = _run_parse(capsys, "Critical risk actions", options=str(path))
        assert output["success"] is False
        assert "error" in output

    def test_turkish_output_not_escaped(self, capsys):
        main.cmd_parse(argparse.Namespace(request="denetim Satın Alma", previous=None, options=None))
        assert "Satın Alma" in capsys.readouterr().out


class TestLoadPrevious:

    def test_empty(self):
        assert main._load_previous(None) is None

    @pytest.mark.parametrize("raw", ["{broken", "[1, 2]"])
    def test_invalid(self, raw):
        with pytest.raises(ReportAssistantError) as exc_info:
            main._load_previous(raw)
        assert exc_info.value.category == ErrorCategory.INVALID_PREVIOUS_FILTERS


class TestChatCommands:

    @pytest.fixture
    def session(self):
        return SessionManager().create_session()

    def test_reset_forgets_filters(self, session):
        session.record_parse(ParseResult(success=True, filters=ParsedFilters(status="Open")))
        assert main.chat_command("reset", session) == "Forgot {'status': 'Open'}. The next request starts fresh."
        assert session.previous_filters == {}
        assert main.chat_command(" RESET ", session) == "No filters were being carried over."

    def test_history_lists_turns(self, session):
        assert main.chat_command("history", session) == "No messages yet."
        session.add_user_message("How many Open actions?")
        session.add_assistant_message("There are 2 actions.", ParsedFilters(status="Open"))
        lines = main.chat_command("history", session).splitlines()
        assert len(lines) == 2
        assert lines[0].endswith("user: How many Open actions?")
        assert lines[1].endswith("assistant: There are 2 actions.  {'status': 'Open'}")

    def test_report_request_is_not_a_command(self, session):
        assert main.chat_command("export them", session) is None
