"""
Notebook Auto-Grader: grade notebook submissions against teacher test cases

Usage:
  main.py serve [--config=PATH]
  main.py grade <submission_id> [--teacher] [--config=PATH]
  main.py check <notebook> <tests> [--teacher]
  main.py export <assignment_id> [--config=PATH]
  main.py dashboard <assignment_id> [--config=PATH]
  main.py (-h | --help)

Options:
  --config=PATH  Path to YAML configuration file [default: autograder_config.yml].
  --teacher      Show hidden test feedback as well.
  -h --help      Show this screen.
"""

import logging
import sys
import webbrowser
from pathlib import Path

from docopt import docopt

from autograder.api import create_app
from autograder.config import DEFAULT_CONFIG_PATH
from autograder.config_loader import GraderConfig, load_config
from autograder.dashboard import run_dashboard
from autograder.errors import AutoGradeError
from autograder.evaluator import evaluate
from autograder.gradebook import GradebookExporter, load_gradebook
from autograder.models import GradeResult
from autograder.notebook_loader import load_notebook_cells, load_test_cases_file
from autograder.service import grade_submission
from autograder.store import GradingStore

LOG = logging.getLogger(__name__)


def print_grade_summary(label: str, result: GradeResult, show_hidden: bool = False) -> None:
    """
    Print a summary of an auto-grade result to console.

    Args:
        label: Submission or notebook being reported.
        result: GradeResult to summarize.
        show_hidden: Include hidden test feedback.
    """
    print(f"\n  {'='*50}")
    print(f"  Submission: {label}")
    print(f"  Total Score: {result.total_score:g}/{result.max_score:g} ({result.percentage:.1f}%)")
    print(f"  {'='*50}")

    entries = result.feedback if show_hidden else result.visible_feedback()
    for entry in entries:
        status = "+" if entry.passed else "-"
        hidden = " [hidden]" if entry.is_hidden else ""
        print(f"  [{status}] cell {entry.cell_index} {entry.test_type}{hidden}: "
              f"{entry.points_earned:g}/{entry.points_possible:g}  {entry.message}")

    hidden_count = len(result.feedback) - len(entries)
    if hidden_count:
        print(f"  ({hidden_count} hidden test(s) not shown)")
    print()


def resolve_config(config_path: Path) -> GraderConfig:
    """Load the config file, falling back to defaults when the default file is absent."""
    if not config_path.exists() and config_path == DEFAULT_CONFIG_PATH:
        LOG.info("No %s found, using default configuration", config_path)
        return GraderConfig()
    return load_config(config_path)


def run_check(notebook_path: Path, tests_path: Path, show_hidden: bool) -> int:
    """Grade a notebook file against a test-case file without persisting anything."""
    cells = load_notebook_cells(notebook_path)
    test_cases = load_test_cases_file(tests_path)
    print(f"Loaded {len(cells)} code cells and {len(test_cases)} test cases")

    result = evaluate(cells, test_cases)
    print_grade_summary(notebook_path.name, result, show_hidden=show_hidden)
    return 0


def run_export(config: GraderConfig, assignment_id: str) -> GradebookExporter:
    """Collect the auto-graded submissions of an assignment and write the gradebook."""
    store = GradingStore(config.data_dir)
    store.get_assignment(assignment_id)

    exporter = GradebookExporter(assignment_id, output_dir=config.grades_dir / assignment_id)
    for submission in store.list_submissions(assignment_id):
        exporter.add_submission(submission)

    output_files = exporter.save_all()
    print(f"Exported {len(exporter.submissions)} graded submissions")
    print(f"  Summary JSON: {output_files.get('summary_json')}")
    print(f"  Summary CSV:  {output_files.get('summary_csv')}")
    return exporter


def main() -> int:
    """
    Main CLI entrypoint.

    Returns:
        Exit code (0 for success, 1 for error).
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    arguments = docopt(__doc__)

    if arguments["check"]:
        try:
            return run_check(Path(arguments["<notebook>"]), Path(arguments["<tests>"]), arguments["--teacher"])
        except Exception as e:
            print(f"Error: {e}")
            return 1

    config_path = Path(arguments["--config"])
    try:
        config = resolve_config(config_path)
    except Exception as e:
        print(f"Error loading config: {e}")
        return 1

    if config.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        if arguments["serve"]:
            app = create_app(GradingStore(config.data_dir), cors_origins=config.cors_origins)
            LOG.info("Serving auto-grader API from %s", config.data_dir)
            app.run(host=config.host, port=config.port, debug=config.verbose)
            return 0

        if arguments["grade"]:
            submission_id = arguments["<submission_id>"]
            result = grade_submission(GradingStore(config.data_dir), submission_id)
            print_grade_summary(submission_id, result, show_hidden=arguments["--teacher"])
            return 0

        if arguments["export"]:
            run_export(config, arguments["<assignment_id>"])
            return 0

        if arguments["dashboard"]:
            assignment_id = arguments["<assignment_id>"]
            grades_dir = config.grades_dir / assignment_id
            if not grades_dir.exists():
                run_export(config, assignment_id)
            submissions = load_gradebook(grades_dir)
            if not submissions:
                print("No graded submissions found.")
                return 1

            import os
            # Only open browser on the main process, not the reloader
            if not os.environ.get("WERKZEUG_RUN_MAIN"):
                url = f"http://127.0.0.1:{config.dashboard_port}"
                print(f"Opening {url} in browser...")
                webbrowser.open(url)
            run_dashboard(submissions, port=config.dashboard_port, debug=config.verbose, grades_dir=grades_dir)
            return 0

    except AutoGradeError as e:
        print(f"Error: {e}")
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
        return 1
    except Exception as e:
        print(f"\nError: {e}")
        if config.verbose:
            import traceback
            traceback.print_exc()
        return 1

    return 1


if __name__ == "__main__":
    sys.exit(main())
