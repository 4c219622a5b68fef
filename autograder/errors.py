"""
Exception hierarchy for the auto-grader.

Lookup failures abort a grading request. Test configuration errors are
contained to the single test case they belong to.
"""


class AutoGradeError(Exception):
    """Base class for all auto-grader errors."""


class LookupFailure(AutoGradeError):
    """A record needed for grading could not be loaded."""


class SubmissionNotFoundError(LookupFailure):
    def __init__(self, submission_id: str) -> None:
        super().__init__("Submission not found")
        self.submission_id = submission_id


class AssignmentNotFoundError(LookupFailure):
    def __init__(self, assignment_id: str) -> None:
        super().__init__("Assignment not found")
        self.assignment_id = assignment_id


class TestCaseFetchError(LookupFailure):
    """The test cases of a notebook could not be read."""

    __test__ = False

    def __init__(self, notebook_id: str, reason: str = "") -> None:
        message = "Failed to fetch test cases"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.notebook_id = notebook_id


class TestConfigError(AutoGradeError):
    """A test case cannot be evaluated because of how it was authored."""

    __test__ = False


class UnknownTestTypeError(TestConfigError):
    __test__ = False

    def __init__(self, test_type: str) -> None:
        super().__init__(f'Unknown test type "{test_type}"')
        self.test_type = test_type


class InvalidTestConfigError(TestConfigError):
    __test__ = False

    def __init__(self, test_type: str, problems: list[str]) -> None:
        details = "; ".join(problems) if problems else "invalid configuration"
        super().__init__(f'Invalid configuration for "{test_type}" test: {details}')
        self.test_type = test_type
        self.problems = problems
