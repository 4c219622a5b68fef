"""
Pydantic models for the notebook auto-grader.

Defines the test-case definitions authored by teachers, the submission
records students produce, and the grading results computed from them.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, BeforeValidator, Field


def _none_to_empty(value: Any) -> Any:
    return "" if value is None else value


def _scalar_to_str(value: Any) -> Any:
    # JSON configs may carry numbers or booleans for expected values
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        return str(value)
    return value


def _authored_type(value: Any) -> Any:
    # Unknown or malformed types are reported when the test case is graded
    return "" if value is None else str(value)


CellText = Annotated[str, BeforeValidator(_none_to_empty)]
ExpectedValue = Annotated[str, BeforeValidator(_scalar_to_str)]
AuthoredType = Annotated[str, BeforeValidator(_authored_type)]


class TestType(str, Enum):
    """The closed set of test types a teacher can author."""

    __test__ = False

    OUTPUT_MATCH = "output_match"
    CODE_CONTAINS = "code_contains"
    FUNCTION_EXISTS = "function_exists"
    VARIABLE_VALUE = "variable_value"


class SubmissionStatus(str, Enum):
    SUBMITTED = "submitted"
    GRADED = "graded"


class OutputMatchConfig(BaseModel):
    """
    Compare a cell's captured output with an expected string.

    Attributes:
        expected_output: Text the output must equal or contain.
        exact_match: Require trimmed equality instead of a substring match.
    """

    test_type: Literal["output_match"] = "output_match"
    expected_output: str = Field(..., description="Expected cell output")
    exact_match: bool = Field(default=False, description="Require trimmed equality")


class CodeContainsConfig(BaseModel):
    """Require a fragment to appear in the cell source."""

    test_type: Literal["code_contains"] = "code_contains"
    contains: str = Field(..., description="Required source fragment")


class FunctionExistsConfig(BaseModel):
    """Require a function definition with the given name in the cell source."""

    test_type: Literal["function_exists"] = "function_exists"
    function_name: str = Field(..., min_length=1, description="Function that must be defined")


class VariableValueConfig(BaseModel):
    """Require a variable name followed by its expected value in source or output."""

    test_type: Literal["variable_value"] = "variable_value"
    variable_name: str = Field(..., min_length=1, description="Variable to look for")
    expected_value: ExpectedValue = Field(..., description="Value the variable should hold")


TestConfig = Annotated[
    Union[OutputMatchConfig, CodeContainsConfig, FunctionExistsConfig, VariableValueConfig],
    Field(discriminator="test_type"),
]


class TestCase(BaseModel):
    """
    A teacher-authored rule checked against one submission cell.

    The test type is kept as authored so that an unknown type is reported
    when the test case is graded instead of when it is loaded.

    Attributes:
        id: Opaque identifier.
        notebook_id: Notebook the test case belongs to.
        cell_index: Zero-based index of the graded cell.
        test_type: One of the TestType values.
        test_config: Type-specific configuration payload.
        points: Points awarded when the test passes.
        is_hidden: Withhold the detailed result from students.
    """

    __test__ = False

    id: str = Field(default="", description="Test case identifier")
    notebook_id: str | None = Field(default=None, description="Owning notebook")
    cell_index: int = Field(..., ge=0, description="Zero-based cell index")
    test_type: AuthoredType = Field(default="", description="Test type as authored")
    test_config: Any = Field(default_factory=dict, description="Type-specific configuration")
    points: float = Field(default=1, ge=0, description="Points for passing")
    is_hidden: bool = Field(default=False, description="Hide details from students")


class SubmissionCell(BaseModel):
    """Source and captured output of one submitted notebook cell."""

    content: CellText = Field(default="", description="Cell source code")
    output: CellText = Field(default="", description="Captured execution output")


class FeedbackEntry(BaseModel):
    """
    Result of one test case.

    Attributes:
        cell_index: Cell the test case targeted.
        test_type: Test type as authored.
        passed: Whether the test passed.
        points_earned: Points awarded.
        points_possible: Points the test case is worth.
        message: Human readable explanation.
        is_hidden: Whether students may see this entry.
        error: Name of the configuration error, if the test could not run.
    """

    cell_index: int
    test_type: str
    passed: bool
    points_earned: float = Field(..., ge=0)
    points_possible: float = Field(..., ge=0)
    message: str
    is_hidden: bool = False
    error: str | None = None


class GradeResult(BaseModel):
    """
    Auto-grade outcome for one submission.

    Attributes:
        total_score: Sum of points for passed tests.
        max_score: Sum of points for all tests.
        percentage: total_score / max_score * 100, or 0 without tests.
        feedback: One entry per test case, in test-case order.
    """

    total_score: float = Field(..., ge=0, description="Points earned")
    max_score: float = Field(..., ge=0, description="Points possible")
    percentage: float = Field(..., ge=0, le=100, description="Score as a percentage")
    feedback: list[FeedbackEntry] = Field(default_factory=list, description="Per-test feedback")

    def visible_feedback(self) -> list[FeedbackEntry]:
        """Feedback entries students are allowed to see."""
        return [entry for entry in self.feedback if not entry.is_hidden]

    def student_view(self) -> "GradeResult":
        """Same scores with hidden feedback removed."""
        return self.model_copy(update={"feedback": self.visible_feedback()})


class NotebookAssignment(BaseModel):
    """An assignment that asks students to complete a notebook."""

    id: str
    notebook_id: str
    title: str = ""
    max_score: float = Field(default=100, ge=0)
    due_date: str | None = None


class Submission(BaseModel):
    """
    A student's submitted notebook and its grading fields.

    Attributes:
        id: Submission identifier.
        assignment_id: Assignment the submission answers.
        student_id: Submitting student.
        submitted_content: Submitted cells, in notebook order.
        submission_time: ISO timestamp of the submission.
        status: Workflow status.
        auto_grade_score: Percentage from the last auto-grade.
        auto_grade_feedback: Full result of the last auto-grade.
        manual_grade_score: Score entered by the teacher.
        manual_feedback: Feedback written by the teacher.
    """

    id: str
    assignment_id: str
    student_id: str = ""
    submitted_content: list[SubmissionCell] = Field(default_factory=list)
    submission_time: str | None = None
    status: SubmissionStatus = SubmissionStatus.SUBMITTED
    auto_grade_score: float | None = None
    auto_grade_feedback: GradeResult | None = None
    manual_grade_score: float | None = None
    manual_feedback: str | None = None
