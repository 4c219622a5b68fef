"""
Grading service: load a submission, evaluate it and persist the result.
"""

import logging

from .evaluator import evaluate
from .models import GradeResult
from .store import GradingStore

LOG = logging.getLogger(__name__)


def grade_submission(store: GradingStore, submission_id: str) -> GradeResult:
    """
    Auto-grade a stored submission.

    Lookup failures propagate before anything is evaluated or written, so a
    failed request never leaves a partial grade behind.

    Args:
        store: Store holding submissions, assignments and test cases.
        submission_id: Submission to grade.

    Returns:
        The full GradeResult, hidden feedback included.

    Raises:
        LookupFailure: If the submission, its assignment or the test cases
            cannot be loaded.
    """
    submission = store.get_submission(submission_id)
    assignment = store.get_assignment(submission.assignment_id)
    test_cases = store.list_test_cases(assignment.notebook_id)

    LOG.debug(
        "Grading submission %s: %d cells, %d test cases",
        submission_id,
        len(submission.submitted_content),
        len(test_cases),
    )

    result = evaluate(submission.submitted_content, test_cases)
    store.save_auto_grade(submission_id, result)

    LOG.info("Auto-grading completed for submission %s: %s%%", submission_id, result.percentage)
    return result
