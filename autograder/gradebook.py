"""
Gradebook exporter for auto-graded submissions.

Saves auto-grade results to a grades folder with JSON and CSV summaries.
"""

import csv
import json
import logging
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from .config import DEFAULT_GRADES_DIR, GRADES_CSV_FILENAME, GRADES_SUMMARY_FILENAME
from .models import Submission

LOG = logging.getLogger(__name__)


def feedback_label(cell_index: int, test_type: str) -> str:
    """Column label identifying a test case in exports."""
    return f"cell {cell_index} {test_type}"


class GradebookExporter:
    """
    Collects auto-graded submissions of an assignment and exports them.
    """

    def __init__(self, assignment_id: str, output_dir: Path | None = None) -> None:
        """
        Initialize the exporter.

        Args:
            assignment_id: Assignment being exported.
            output_dir: Directory to save grades in. Defaults to ./grades/
        """
        self.assignment_id = assignment_id
        self.output_dir = output_dir or DEFAULT_GRADES_DIR
        self.submissions: list[Submission] = []
        self.timestamp = datetime.now().isoformat()

    def add_submission(self, submission: Submission) -> None:
        """
        Add a submission to the gradebook.

        Submissions that were never auto-graded are skipped.
        """
        if submission.auto_grade_feedback is None:
            LOG.info("Skipping submission %s: not auto-graded yet", submission.id)
            return
        self.submissions.append(submission)

    def save_all(self) -> dict[str, Path]:
        """
        Save all grades to the output directory.

        Creates:
        - Individual JSON files per submission
        - Summary JSON with statistics and all grades
        - Summary CSV for import into a spreadsheet gradebook

        Returns:
            Dictionary of output file paths.
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)

        output_files: dict[str, Path] = {}

        self.submissions.sort(key=lambda s: (s.student_id, s.id))

        for submission in self.submissions:
            individual_path = self.output_dir / f"{submission.id}.json"
            with open(individual_path, "w", encoding="utf-8") as f:
                f.write(submission.model_dump_json(indent=2))
            output_files[submission.id] = individual_path

        summary_path = self.output_dir / GRADES_SUMMARY_FILENAME
        summary_data = {
            "assignment_id": self.assignment_id,
            "timestamp": self.timestamp,
            "total_submissions": len(self.submissions),
            "statistics": self.calculate_statistics(),
            "submissions": [s.model_dump(mode="json") for s in self.submissions],
        }
        with open(summary_path, "w", encoding="utf-8") as f:
            json.dump(summary_data, f, indent=2)
        output_files["summary_json"] = summary_path

        csv_path = self.output_dir / GRADES_CSV_FILENAME
        self._save_csv(csv_path)
        output_files["summary_csv"] = csv_path

        return output_files

    def calculate_statistics(self) -> dict:
        """
        Calculate summary statistics for the exported submissions.

        Returns:
            Dictionary with score statistics and the pass rate of each test.
        """
        if not self.submissions:
            return {}

        percentages = [s.auto_grade_feedback.percentage for s in self.submissions]

        attempts: dict[str, int] = {}
        passes: dict[str, int] = {}
        for submission in self.submissions:
            for entry in submission.auto_grade_feedback.feedback:
                label = feedback_label(entry.cell_index, entry.test_type)
                attempts[label] = attempts.get(label, 0) + 1
                passes[label] = passes.get(label, 0) + (1 if entry.passed else 0)

        return {
            "average_percentage": sum(percentages) / len(percentages),
            "highest_percentage": max(percentages),
            "lowest_percentage": min(percentages),
            "graded_count": len(self.submissions),
            "test_pass_rates": {label: passes[label] / attempts[label] * 100 for label in attempts},
        }

    def _save_csv(self, csv_path: Path) -> None:
        """
        Save grades as CSV file.

        Args:
            csv_path: Path to save CSV file.
        """
        header = [
            "submission_id",
            "student_id",
            "total_score",
            "max_score",
            "percentage",
            "status",
            "passed_tests",
        ]

        with open(csv_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(header)

            for submission in self.submissions:
                result = submission.auto_grade_feedback
                passed = sum(1 for entry in result.feedback if entry.passed)
                writer.writerow([
                    submission.id,
                    submission.student_id,
                    result.total_score,
                    result.max_score,
                    f"{result.percentage:.1f}%",
                    submission.status.value,
                    f"{passed}/{len(result.feedback)}",
                ])


def load_gradebook(grades_dir: Path) -> list[Submission]:
    """
    Load exported submissions from a grades directory.

    Args:
        grades_dir: Path to the grades directory.

    Returns:
        List of auto-graded Submission objects.
    """
    submissions: list[Submission] = []

    summary_path = grades_dir / GRADES_SUMMARY_FILENAME
    if summary_path.exists():
        with open(summary_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        for item in data.get("submissions", []):
            submissions.append(Submission.model_validate(item))
        submissions.sort(key=lambda s: (s.student_id, s.id))
        return submissions

    for json_file in grades_dir.glob("*.json"):
        try:
            submission = Submission.model_validate_json(json_file.read_text(encoding="utf-8"))
        except ValidationError as e:
            LOG.warning("Skipping unreadable grade file %s: %s", json_file.name, e)
            continue
        if submission.auto_grade_feedback is not None:
            submissions.append(submission)

    submissions.sort(key=lambda s: (s.student_id, s.id))
    return submissions
