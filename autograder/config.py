"""
Configuration constants for the notebook auto-grader.
"""

from pathlib import Path


# Store layout (one directory per table)
SUBMISSIONS_DIRNAME: str = "submissions"
ASSIGNMENTS_DIRNAME: str = "assignments"
TEST_CASES_DIRNAME: str = "test_cases"

# Default paths (can be overridden via config file)
DEFAULT_CONFIG_PATH: Path = Path("autograder_config.yml")
DEFAULT_DATA_DIR: Path = Path("data")
DEFAULT_GRADES_DIR: Path = Path("grades")
GRADES_SUMMARY_FILENAME: str = "grades_summary.json"
GRADES_CSV_FILENAME: str = "grades_summary.csv"

# HTTP service
DEFAULT_HOST: str = "127.0.0.1"
DEFAULT_PORT: int = 5000
DEFAULT_DASHBOARD_PORT: int = 8050
CORS_ALLOW_HEADERS: list[str] = ["authorization", "x-client-info", "apikey", "content-type"]

# Request audiences for the grading endpoint
STUDENT_AUDIENCE: str = "student"
TEACHER_AUDIENCE: str = "teacher"

# Offline test-case files
TEST_CASE_FILE_EXTENSIONS: list[str] = [".yml", ".yaml", ".json"]
