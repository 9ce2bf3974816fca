"""
Golden Dataset Infrastructure for Regression Testing

Provides structured request cases with expected parse outcomes for validating
the report request parser against known-good results.

Usage:
    from tests.golden_dataset import GoldenDataset, run_regression_suite

    dataset = GoldenDataset.load(Path("tests/golden_sets/v1.0.json"))
    report = run_regression_suite(parser, dataset)
"""

import json
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Dict, Any, Optional

logger = logging.getLogger(__name__)


@dataclass
class GoldenTestCase:
    """
    A single request with its expected parse.

    Cases should come from real chat requests whose correct filters have
    been checked by hand.
    """
    test_id: str
    name: str
    request: str

    # Expected parse
    expected_success: bool = True
    expected_filters: Dict[str, str] = field(default_factory=dict)
    expected_count_request: Optional[bool] = None
    expect_casual: bool = False

    # Inputs besides the request
    available_options: Optional[Dict[str, List[str]]] = None
    previous_filters: Optional[Dict[str, str]] = None

    description: str = ""
    notes: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GoldenTestCase":
        """Create test case from dictionary."""
        return cls(
            test_id=data["test_id"],
            name=data["name"],
            request=data["request"],
            expected_success=data.get("expected_success", True),
            expected_filters=data.get("expected_filters", {}),
            expected_count_request=data.get("expected_count_request"),
            expect_casual=data.get("expect_casual", False),
            available_options=data.get("available_options"),
            previous_filters=data.get("previous_filters"),
            description=data.get("description", ""),
            notes=data.get("notes"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize test case to dictionary."""
        return {
            "test_id": self.test_id,
            "name": self.name,
            "request": self.request,
            "expected_success": self.expected_success,
            "expected_filters": self.expected_filters,
            "expected_count_request": self.expected_count_request,
            "expect_casual": self.expect_casual,
            "available_options": self.available_options,
            "previous_filters": self.previous_filters,
            "description": self.description,
            "notes": self.notes,
        }


@dataclass
class CaseResult:
    """Result of running a single test case."""
    test_id: str
    test_name: str
    passed: bool

    actual_success: Optional[bool] = None
    actual_filters: Dict[str, str] = field(default_factory=dict)
    actual_count_request: Optional[bool] = None

    failure_reasons: List[str] = field(default_factory=list)
    execution_time_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "test_id": self.test_id,
            "test_name": self.test_name,
            "passed": self.passed,
            "actual_success": self.actual_success,
            "actual_filters": self.actual_filters,
            "actual_count_request": self.actual_count_request,
            "failure_reasons": self.failure_reasons,
            "execution_time_ms": self.execution_time_ms,
        }


@dataclass
class RegressionReport:
    """Summary report of a regression test run."""
    dataset_version: str
    run_timestamp: str
    total_tests: int
    passed: int
    failed: int

    pass_rate: float = 0.0
    total_execution_time_ms: float = 0.0

    results: List[CaseResult] = field(default_factory=list)

    def __post_init__(self):
        if self.total_tests > 0:
            self.pass_rate = self.passed / self.total_tests

    @property
    def failures(self) -> List[CaseResult]:
        return [r for r in self.results if not r.passed]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dataset_version": self.dataset_version,
            "run_timestamp": self.run_timestamp,
            "summary": {
                "total_tests": self.total_tests,
                "passed": self.passed,
                "failed": self.failed,
                "pass_rate": f"{self.pass_rate:.1%}",
                "total_execution_time_ms": self.total_execution_time_ms,
            },
            "results": [r.to_dict() for r in self.results],
        }

    def print_summary(self):
        """Print human-readable summary."""
        print("\n" + "=" * 60)
        print("REGRESSION TEST RESULTS")
        print("=" * 60)
        print(f"Dataset Version: {self.dataset_version}")
        print(f"Run Time: {self.run_timestamp}")
        print(f"\nResults: {self.passed}/{self.total_tests} passed ({self.pass_rate:.1%})")

        if self.failed > 0:
            print("\n" + "-" * 60)
            print("FAILURES:")
            for result in self.failures:
                print(f"\n  [{result.test_id}] {result.test_name}")
                for reason in result.failure_reasons:
                    print(f"    - {reason}")
        print("=" * 60)


@dataclass
class GoldenDataset:
    """Collection of test cases for regression testing."""
    version: str
    name: str
    description: str
    created_at: str
    test_cases: List[GoldenTestCase]
    notes: Optional[str] = None

    @classmethod
    def load(cls, path: Path) -> "GoldenDataset":
        """Load dataset from JSON file."""
        with open(path, encoding="utf-8") as f:
            data = json.load(f)

        return cls(
            version=data["version"],
            name=data["name"],
            description=data.get("description", ""),
            created_at=data["created_at"],
            test_cases=[GoldenTestCase.from_dict(tc) for tc in data.get("test_cases", [])],
            notes=data.get("notes"),
        )

    def save(self, path: Path):
        """Save dataset to JSON file."""
        data = {
            "version": self.version,
            "name": self.name,
            "description": self.description,
            "created_at": self.created_at,
            "notes": self.notes,
            "test_cases": [tc.to_dict() for tc in self.test_cases],
        }

        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def add_test_case(self, test_case: GoldenTestCase):
        """Add a test case to the dataset."""
        self.test_cases.append(test_case)

    def get_test_case(self, test_id: str) -> Optional[GoldenTestCase]:
        """Get a test case by ID."""
        for tc in self.test_cases:
            if tc.test_id == test_id:
                return tc
        return None


def run_single_test(parser, test_case: GoldenTestCase) -> CaseResult:
    """Parse one request and compare against the expected outcome."""
    result = CaseResult(test_id=test_case.test_id, test_name=test_case.name, passed=True)
    start_time = time.time()

    parsed = parser.parse(
        test_case.request,
        available_options=test_case.available_options,
        previous_filters=test_case.previous_filters,
    )
    result.execution_time_ms = (time.time() - start_time) * 1000

    result.actual_success = parsed.success
    result.actual_filters = parsed.filters.to_dict()
    result.actual_count_request = parsed.is_count_request

    if parsed.success != test_case.expected_success:
        result.failure_reasons.append(
            f"Success mismatch: expected {test_case.expected_success}, got {parsed.success}"
        )

    if result.actual_filters != test_case.expected_filters:
        result.failure_reasons.append(
            f"Filter mismatch: expected {test_case.expected_filters}, got {result.actual_filters}"
        )

    if parsed.is_casual != test_case.expect_casual:
        result.failure_reasons.append(
            f"Casual mismatch: expected {test_case.expect_casual}, got {parsed.is_casual}"
        )

    if (
        test_case.expected_count_request is not None
        and parsed.is_count_request != test_case.expected_count_request
    ):
        result.failure_reasons.append(
            f"Count intent mismatch: expected {test_case.expected_count_request}, got {parsed.is_count_request}"
        )

    result.passed = not result.failure_reasons
    return result


def run_regression_suite(parser, dataset: GoldenDataset) -> RegressionReport:
    """
    Run all test cases in a dataset.

    Args:
        parser: A ReportRequestParser instance
        dataset: The golden dataset to test against

    Returns:
        RegressionReport with all results
    """
    start_time = time.time()
    logger.info(f"Running regression suite: {dataset.name} v{dataset.version}")

    results = []
    for i, tc in enumerate(dataset.test_cases):
        result = run_single_test(parser, tc)
        results.append(result)
        status = "✅" if result.passed else "❌"
        logger.info(f"  {status} [{i + 1}/{len(dataset.test_cases)}] {tc.name}")

    passed = sum(1 for r in results if r.passed)
    return RegressionReport(
        dataset_version=dataset.version,
        run_timestamp=datetime.now(timezone.utc).isoformat(),
        total_tests=len(results),
        passed=passed,
        failed=len(results) - passed,
        total_execution_time_ms=(time.time() - start_time) * 1000,
        results=results,
    )


DEFAULT_CASES = [
    GoldenTestCase("GT-001", "Status and exact year", "Completed actions for year 2023",
                   expected_filters={"status": "Completed", "auditYear": "2023"},
                   expected_count_request=False),
    GoldenTestCase("GT-002", "Count with two fields", "How many actions with Critical risk and Overdue status?",
                   expected_filters={"riskLevel": "Critical", "status": "Overdue"},
                   expected_count_request=True),
    GoldenTestCase("GT-003", "Export all is not a year", "Export all actions with Open status",
                   expected_filters={"status": "Open"}, expected_count_request=False),
    GoldenTestCase("GT-004", "Preposition keeps 2024 exact", "Show overdue actions for 2024 with Critical risk",
                   expected_filters={"status": "Overdue", "riskLevel": "Critical", "auditYear": "2024"}),
    GoldenTestCase("GT-005", "Qualifier keeps year exact", "only 2025 open actions",
                   expected_filters={"auditYear": "2025", "status": "Open"}),
    GoldenTestCase("GT-006", "Bare year collapses to range", "Open actions year 2025",
                   expected_filters={"status": "Open", "auditYear": "2024+"}),
    GoldenTestCase("GT-007", "All years", "audit year all, open actions",
                   expected_filters={"auditYear": "all", "status": "Open"}),
    GoldenTestCase("GT-008", "Range literal", "2024+ critical actions",
                   expected_filters={"auditYear": "2024+", "riskLevel": "Critical"}),
    GoldenTestCase("GT-009", "Turkish status and year", "Açık aksiyonlar 2023 yılı için",
                   expected_filters={"status": "Open", "auditYear": "2023"}),
    GoldenTestCase("GT-010", "Turkish upper case risk", "KRİTİK riskli aksiyonları göster",
                   expected_filters={"riskLevel": "Critical"}),
    GoldenTestCase("GT-011", "Greeting", "hello",
                   expect_casual=True, expected_count_request=False),
    GoldenTestCase("GT-012", "Thanks with punctuation", "thanks!",
                   expect_casual=True, previous_filters={"status": "Open"}),
    GoldenTestCase("GT-013", "Gibberish", "asdkjasd", expected_success=False),
    GoldenTestCase("GT-014", "Export them", "export them",
                   previous_filters={"status": "Open", "auditYear": "2024"},
                   expected_filters={"status": "Open", "auditYear": "2024"}),
    GoldenTestCase("GT-015", "Bare export", "export pls",
                   previous_filters={"riskLevel": "High"},
                   expected_filters={"riskLevel": "High"}),
    GoldenTestCase("GT-016", "Follow-up override", "same but overdue",
                   previous_filters={"status": "Open", "riskLevel": "High"},
                   expected_filters={"status": "Overdue", "riskLevel": "High"}),
    GoldenTestCase("GT-017", "Responsible e-mail", "Open actions where responsible is john.doe@corp.com",
                   expected_filters={"status": "Open", "responsibleEmail": "john.doe@corp.com"}),
    GoldenTestCase("GT-018", "Audit name", "audit Cyber Security with Open status",
                   expected_filters={"auditName": "Cyber Security", "status": "Open"}),
    GoldenTestCase("GT-019", "Audit lead", "audit lead is Jane Doe",
                   expected_filters={"auditLead": "Jane Doe"}),
    GoldenTestCase("GT-020", "C-level", "Overdue actions for c-level CFO",
                   expected_filters={"status": "Overdue", "cLevel": "CFO"}),
    GoldenTestCase("GT-021", "Count with preposition year", "How many Critical risk actions in 2023?",
                   expected_filters={"riskLevel": "Critical", "auditYear": "2023"},
                   expected_count_request=True),
    GoldenTestCase("GT-022", "Two-word status", "Risk accepted actions",
                   expected_filters={"status": "Risk Accepted"}),
    GoldenTestCase("GT-023", "Turkish count", "Kaç tane gecikmiş aksiyon var?",
                   expected_filters={"status": "Overdue"}, expected_count_request=True),
    GoldenTestCase("GT-024", "From year", "Show actions from 2024",
                   expected_filters={"auditYear": "2024"}),
    GoldenTestCase("GT-025", "Vocabulary spelling", "audit cyber security with High risk",
                   available_options={"auditNames": ["Cyber Security"]},
                   expected_filters={"auditName": "Cyber Security", "riskLevel": "High"}),
    GoldenTestCase("GT-026", "Rejected by vocabulary", "Critical risk actions",
                   available_options={"riskLevels": ["High", "Low"]},
                   expected_success=False),
    GoldenTestCase("GT-027", "Responsible name to e-mail", "Open actions responsible Jane",
                   available_options={"responsibleEmails": ["jane.doe@corp.com", "bob@corp.com"]},
                   expected_filters={"status": "Open", "responsibleEmail": "jane.doe@corp.com"}),
]


def build_default_dataset() -> GoldenDataset:
    """The built-in request set, as a dataset."""
    return GoldenDataset(
        version="1.0",
        name="report-requests",
        description="English and Turkish report requests with hand-checked filters",
        created_at="2025-01-01T00:00:00",
        test_cases=list(DEFAULT_CASES),
    )
