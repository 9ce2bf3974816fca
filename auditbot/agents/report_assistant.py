"""
Report Assistant

Drives one chat turn end to end, following the parser's caller contract:
1. Parse the request with the vocabulary of the loaded actions and the
   session's previous filters
2. Failure -> show the usage guidance; casual reply -> show it and stop
3. Remember the filters, filter the actions locally
4. Count request -> count reply; otherwise export and reply

Failures carry a ClassifiedError: EMPTY_REQUEST or NO_FILTERS_EXTRACTED when
parsing fails, NO_MATCHING_DATA when an export would be empty, and the
classified exception when writing the report fails.

Counts and replies are composed here, never by the parser.
"""
import logging
import random
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

import pandas as pd

from auditbot.core.data_context import get_data_context
from auditbot.core.error_taxonomy import (
    ClassifiedError,
    ErrorCategory,
    ErrorSeverity,
    RecoveryAction,
    ReportAssistantError,
    classify_error,
)
from auditbot.core.export_filter_builder import ExportFilterBuilder, ExportFilterParams
from auditbot.core.memory import Session, get_session_manager
from auditbot.core.report_parser import ParsedFilters, ReportRequestParser
from auditbot.core.responses import (
    EXPORT_FAILED_REPLY,
    compose_count_reply,
    compose_export_reply,
)
from auditbot.data.actions import ActionFilter, available_options
from auditbot.tools.excel_output import ExcelGenerator
from config.settings import get_config

logger = logging.getLogger(__name__)


@dataclass
class AssistantResponse:
    """What the assistant shows for one turn."""
    success: bool
    message: str
    filters: ParsedFilters = field(default_factory=ParsedFilters)
    count: Optional[int] = None
    file_path: Optional[str] = None
    export_params: Optional[ExportFilterParams] = None
    error: Optional[ClassifiedError] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "filters": self.filters.to_dict(),
            "count": self.count,
            "file_path": self.file_path,
            "export_params": self.export_params.to_query_params() if self.export_params else None,
            "error": self.error.category.name if self.error else None,
        }


class ReportAssistant:
    """
    Chat front end over a loaded action table.

    Usage:
        assistant = ReportAssistant(actions_df, output_dir=".outputs")
        session = assistant.new_session()
        assistant.handle("How many Open actions?", session).message
    """

    def __init__(
        self,
        actions: pd.DataFrame,
        output_dir: Optional[str] = None,
        rng: Optional[random.Random] = None,
        export_builder: Optional[ExportFilterBuilder] = None,
        backend_exporter: Optional[Callable[[ExportFilterParams], None]] = None,
    ):
        """
        Initialize the assistant.

        Args:
            actions: Action table with logical column names
            output_dir: Where Excel reports are written (config default if None)
            rng: Random generator for replies
            export_builder: Builds export endpoint parameters
            backend_exporter: Called with field-filter parameters when a year
                              outside the loaded data is requested. Without
                              one, such requests are served from the local table.
        """
        config = get_config()
        self.actions = actions
        self.options = available_options(actions)
        self.rng = rng
        self.parser = ReportRequestParser(rng=rng)
        self.action_filter = ActionFilter()
        self.export_builder = export_builder or ExportFilterBuilder(
            role=config.export.role,
            loaded_year=config.data.loaded_year,
        )
        self.backend_exporter = backend_exporter
        self.excel = ExcelGenerator(output_dir or config.export.output_dir)

    def new_session(self, user_id: str = None) -> Session:
        return get_session_manager().create_session(user_id=user_id)

    def end_session(self, session: Session):
        get_session_manager().close_session(session.session_id)

    def handle(self, request: str, session: Session) -> AssistantResponse:
        """
        Answer one chat request.

        Args:
            request: The user's message
            session: Chat session holding the previous filters

        Returns:
            AssistantResponse with the reply text and what was done
        """
        session.add_user_message(request or "")
        result = self.parser.parse(request, self.options, session.previous_filters)

        if not result.success:
            category = ErrorCategory.NO_FILTERS_EXTRACTED if (request or "").strip() else ErrorCategory.EMPTY_REQUEST
            error = self._rephrase_error(category, "No filters in request", "parse", {"request": request})
            return self._reply(session, AssistantResponse(success=False, message=result.error, error=error))

        if result.is_casual:
            return self._reply(session, AssistantResponse(success=True, message=result.message))

        session.record_parse(result)
        filters = result.filters
        filtered = self.action_filter.apply(self.actions, filters)

        if result.is_count_request:
            return self._reply(session, AssistantResponse(
                success=True,
                message=compose_count_reply(filtered.filtered_count, self.rng),
                filters=filters,
                count=filtered.filtered_count,
            ))

        return self._reply(session, self._export(filters, filtered))

    def _export(self, filters: ParsedFilters, filtered) -> AssistantResponse:
        params = self.export_builder.build(filters, filtered.action_keys)

        try:
            if self.backend_exporter and self.export_builder.needs_backend_filtering(filters):
                self.backend_exporter(params)
                return AssistantResponse(
                    success=True,
                    message=compose_export_reply(None, self.rng),
                    filters=filters,
                    export_params=params,
                )

            if filtered.filtered_count == 0:
                error = self._rephrase_error(
                    ErrorCategory.NO_MATCHING_DATA, "No actions matched", "filter", {"filters": filters.to_dict()}
                )
                return AssistantResponse(
                    success=False, message=error.user_message, filters=filters, count=0, error=error
                )

            columns = [c for c in get_data_context().get_report_columns() if c in filtered.data.columns]
            output = self.excel.create_action_report(
                filtered.to_records(),
                title="Audit Actions Report",
                columns=columns or None,
                filter_description=params.describe(),
            )
        except (ReportAssistantError, OSError) as e:
            classified = classify_error(e, pipeline_phase="export", context={"filters": filters.to_dict()})
            logger.error(f"Export failed: {classified.message}")
            return AssistantResponse(success=False, message=EXPORT_FAILED_REPLY, filters=filters, error=classified)

        return AssistantResponse(
            success=True,
            message=compose_export_reply(filtered.filtered_count, self.rng),
            filters=filters,
            count=filtered.filtered_count,
            file_path=output.file_path,
            export_params=params,
        )

    @staticmethod
    def _rephrase_error(category: ErrorCategory, message: str, phase: str, context: Dict[str, Any]) -> ClassifiedError:
        """A failure the user gets past by asking differently."""
        error = ClassifiedError(
            category=category,
            severity=ErrorSeverity.LOW,
            message=message,
            recoverable=True,
            recovery_actions=[],
            pipeline_phase=phase,
            context=context,
        )
        error.recovery_actions.append(RecoveryAction.rephrase(error.user_message))
        logger.info(f"{category.name} during {phase}: {context}")
        return error

    @staticmethod
    def _reply(session: Session, response: AssistantResponse) -> AssistantResponse:
        session.add_assistant_message(response.message, response.filters)
        return response
