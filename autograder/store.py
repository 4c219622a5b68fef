"""
JSON file store for submissions, assignments and test cases.

Each table is a directory under the data directory. Submissions and
assignments are stored one JSON file per record; the test cases of a
notebook are stored together as a JSON list.
"""

import json
import logging
import os
import tempfile
import uuid
from pathlib import Path

from pydantic import ValidationError

from .checks import parse_test_config
from .config import ASSIGNMENTS_DIRNAME, SUBMISSIONS_DIRNAME, TEST_CASES_DIRNAME
from .errors import AssignmentNotFoundError, SubmissionNotFoundError, TestCaseFetchError
from .models import GradeResult, NotebookAssignment, Submission, SubmissionStatus, TestCase

LOG = logging.getLogger(__name__)


def _write_atomic(path: Path, text: str) -> None:
    """Write text to path through a temporary file so readers never see a partial file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class GradingStore:
    """
    File-backed store used by the grading service.

    Writes replace whole files, so concurrent re-grades of the same
    submission resolve to the last write.
    """

    def __init__(self, data_dir: Path) -> None:
        """
        Initialize the store.

        Args:
            data_dir: Root directory holding the table directories.
        """
        self.data_dir = Path(data_dir)
        self.submissions_dir = self.data_dir / SUBMISSIONS_DIRNAME
        self.assignments_dir = self.data_dir / ASSIGNMENTS_DIRNAME
        self.test_cases_dir = self.data_dir / TEST_CASES_DIRNAME

    def _record_path(self, directory: Path, record_id: str) -> Path:
        # Ids come from requests; keep them inside the table directory
        if not record_id or Path(record_id).name != record_id or record_id.startswith("."):
            raise ValueError(f"Invalid record id: {record_id!r}")
        return directory / f"{record_id}.json"

    # Submissions

    def get_submission(self, submission_id: str) -> Submission:
        try:
            path = self._record_path(self.submissions_dir, submission_id)
        except ValueError:
            raise SubmissionNotFoundError(submission_id)
        if not path.exists():
            raise SubmissionNotFoundError(submission_id)
        try:
            return Submission.model_validate_json(path.read_text(encoding="utf-8"))
        except ValidationError as e:
            LOG.error("Submission %s is unreadable: %s", submission_id, e)
            raise SubmissionNotFoundError(submission_id) from e

    def save_submission(self, submission: Submission) -> Path:
        path = self._record_path(self.submissions_dir, submission.id)
        _write_atomic(path, submission.model_dump_json(indent=2))
        return path

    def list_submissions(self, assignment_id: str | None = None) -> list[Submission]:
        """
        List stored submissions, optionally only those of one assignment.

        Unreadable files are skipped with a warning.
        """
        submissions: list[Submission] = []
        if not self.submissions_dir.exists():
            return submissions

        for json_file in sorted(self.submissions_dir.glob("*.json")):
            try:
                submission = Submission.model_validate_json(json_file.read_text(encoding="utf-8"))
            except ValidationError as e:
                LOG.warning("Skipping unreadable submission file %s: %s", json_file.name, e)
                continue
            if assignment_id is None or submission.assignment_id == assignment_id:
                submissions.append(submission)
        return submissions

    def save_auto_grade(self, submission_id: str, result: GradeResult) -> Submission:
        """
        Record an auto-grade result on a submission.

        The full result, hidden feedback included, replaces any earlier
        auto-grade and the submission is marked as graded.

        Args:
            submission_id: Submission to update.
            result: Result of the evaluator.

        Returns:
            The updated submission.
        """
        submission = self.get_submission(submission_id)
        updated = submission.model_copy(
            update={
                "auto_grade_score": result.percentage,
                "auto_grade_feedback": result,
                "status": SubmissionStatus.GRADED,
            }
        )
        self.save_submission(updated)
        return updated

    def save_manual_grade(self, submission_id: str, score: float, feedback: str = "") -> Submission:
        """
        Record the teacher's manual grade on a submission.

        The auto-grade fields are left untouched.

        Args:
            submission_id: Submission to update.
            score: Score entered by the teacher.
            feedback: Feedback written by the teacher.

        Returns:
            The updated submission.

        Raises:
            ValueError: If the score is negative or above the assignment's maximum.
        """
        submission = self.get_submission(submission_id)
        assignment = self.get_assignment(submission.assignment_id)
        if not 0 <= score <= assignment.max_score:
            raise ValueError(f"Score must be between 0 and {assignment.max_score:g}")

        updated = submission.model_copy(
            update={
                "manual_grade_score": score,
                "manual_feedback": feedback,
                "status": SubmissionStatus.GRADED,
            }
        )
        self.save_submission(updated)
        LOG.info("Manual grade %s recorded for submission %s", score, submission_id)
        return updated

    # Assignments

    def get_assignment(self, assignment_id: str) -> NotebookAssignment:
        try:
            path = self._record_path(self.assignments_dir, assignment_id)
        except ValueError:
            raise AssignmentNotFoundError(assignment_id)
        if not path.exists():
            raise AssignmentNotFoundError(assignment_id)
        try:
            return NotebookAssignment.model_validate_json(path.read_text(encoding="utf-8"))
        except ValidationError as e:
            LOG.error("Assignment %s is unreadable: %s", assignment_id, e)
            raise AssignmentNotFoundError(assignment_id) from e

    def save_assignment(self, assignment: NotebookAssignment) -> Path:
        path = self._record_path(self.assignments_dir, assignment.id)
        _write_atomic(path, assignment.model_dump_json(indent=2))
        return path

    # Test cases

    def list_test_cases(self, notebook_id: str) -> list[TestCase]:
        """
        Load the test cases of a notebook ordered by cell index.

        Test cases targeting the same cell keep their stored order.

        Args:
            notebook_id: Notebook whose test cases to load.

        Returns:
            List of TestCase objects, empty if the notebook has none.

        Raises:
            TestCaseFetchError: If the stored test cases cannot be read.
        """
        try:
            path = self._record_path(self.test_cases_dir, notebook_id)
        except ValueError as e:
            raise TestCaseFetchError(notebook_id, str(e)) from e
        if not path.exists():
            return []

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(data, list):
                raise TestCaseFetchError(notebook_id, "expected a list of test cases")
            test_cases = [TestCase.model_validate(item) for item in data]
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            raise TestCaseFetchError(notebook_id, str(e)) from e

        return sorted(test_cases, key=lambda tc: tc.cell_index)

    def _save_test_cases(self, notebook_id: str, test_cases: list[TestCase]) -> None:
        path = self._record_path(self.test_cases_dir, notebook_id)
        payload = [tc.model_dump(mode="json") for tc in test_cases]
        _write_atomic(path, json.dumps(payload, indent=2))

    def add_test_case(self, notebook_id: str, test_case: TestCase) -> TestCase:
        """
        Add a test case to a notebook.

        The configuration is validated before anything is written.

        Args:
            notebook_id: Notebook to add the test case to.
            test_case: Test case to add. An id is generated if it has none.

        Returns:
            The stored test case.

        Raises:
            TestConfigError: If the test type or its configuration is invalid.
        """
        parse_test_config(test_case)

        stored = test_case.model_copy(
            update={"id": test_case.id or str(uuid.uuid4()), "notebook_id": notebook_id}
        )
        test_cases = self.list_test_cases(notebook_id)
        test_cases.append(stored)
        self._save_test_cases(notebook_id, test_cases)
        LOG.info("Added %s test case %s to notebook %s", stored.test_type, stored.id, notebook_id)
        return stored

    def delete_test_case(self, notebook_id: str, test_case_id: str) -> bool:
        """
        Remove a test case from a notebook.

        Returns:
            True if a test case was removed.
        """
        test_cases = self.list_test_cases(notebook_id)
        remaining = [tc for tc in test_cases if tc.id != test_case_id]
        if len(remaining) == len(test_cases):
            return False
        self._save_test_cases(notebook_id, remaining)
        LOG.info("Deleted test case %s from notebook %s", test_case_id, notebook_id)
        return True
