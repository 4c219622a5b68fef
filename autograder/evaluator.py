"""
Grading evaluator.

Scores a submission's cells against an ordered list of test cases. The
evaluation is a pure function of its inputs: nothing is persisted and the
inputs are never modified.
"""

import logging
from typing import Sequence

from .checks import parse_test_config, run_check
from .errors import TestConfigError
from .models import FeedbackEntry, GradeResult, SubmissionCell, TestCase

LOG = logging.getLogger(__name__)


def _cell_at(cells: Sequence[SubmissionCell], index: int) -> tuple[str, str]:
    """Return (content, output) of a cell, or empty strings when out of range."""
    if 0 <= index < len(cells):
        cell = cells[index]
        return cell.content, cell.output
    return "", ""


def evaluate_test_case(cells: Sequence[SubmissionCell], test_case: TestCase) -> FeedbackEntry:
    """
    Evaluate a single test case.

    A test case that cannot be evaluated because of its configuration fails
    with zero points and the configuration error as its message.

    Args:
        cells: Submitted cells in notebook order.
        test_case: Test case to evaluate.

    Returns:
        FeedbackEntry for the test case.
    """
    content, output = _cell_at(cells, test_case.cell_index)
    error = None

    try:
        config = parse_test_config(test_case)
        passed, message = run_check(config, content, output)
    except TestConfigError as e:
        LOG.warning("Test case %s (cell %d) is misconfigured: %s", test_case.id, test_case.cell_index, e)
        passed, message, error = False, str(e), type(e).__name__

    return FeedbackEntry(
        cell_index=test_case.cell_index,
        test_type=test_case.test_type,
        passed=passed,
        points_earned=test_case.points if passed else 0,
        points_possible=test_case.points,
        message=message,
        is_hidden=test_case.is_hidden,
        error=error,
    )


def evaluate(cells: Sequence[SubmissionCell], test_cases: Sequence[TestCase]) -> GradeResult:
    """
    Grade submitted cells against test cases.

    Every test case contributes its points to the maximum score; only passed
    test cases contribute to the total. Feedback keeps the test-case order.

    Args:
        cells: Submitted cells in notebook order.
        test_cases: Test cases in grading order.

    Returns:
        GradeResult with totals, percentage and one feedback entry per test case.
    """
    total_score = 0.0
    max_score = 0.0
    feedback: list[FeedbackEntry] = []

    for test_case in test_cases:
        entry = evaluate_test_case(cells, test_case)
        max_score += entry.points_possible
        total_score += entry.points_earned
        feedback.append(entry)

    percentage = (total_score / max_score) * 100 if max_score > 0 else 0.0

    return GradeResult(
        total_score=total_score,
        max_score=max_score,
        percentage=percentage,
        feedback=feedback,
    )
