"""
Loaders for grading inputs stored on disk.

Reads submitted cells from Jupyter notebooks and test cases from YAML or
JSON files, for grading notebooks outside the service.
"""

import json
import logging
from pathlib import Path

import nbformat
import yaml

from .config import TEST_CASE_FILE_EXTENSIONS
from .models import SubmissionCell, TestCase

LOG = logging.getLogger(__name__)


def _output_text(output) -> str:
    """Flatten one notebook output into the text a student would have seen."""
    output_type = output.get("output_type")
    if output_type == "stream":
        return output.get("text", "")
    if output_type in ("execute_result", "display_data"):
        text = output.get("data", {}).get("text/plain", "")
        return text if text.endswith("\n") or not text else text + "\n"
    if output_type == "error":
        return f"{output.get('ename', 'Error')}: {output.get('evalue', '')}\n"
    return ""


def load_notebook_cells(notebook_path: Path) -> list[SubmissionCell]:
    """
    Read the code cells of a notebook as submission cells.

    Markdown and raw cells are skipped so that cell indexes count code
    cells only, as in the classroom notebook editor.

    Args:
        notebook_path: Path to the .ipynb file.

    Returns:
        List of SubmissionCell objects in notebook order.

    Raises:
        FileNotFoundError: If the notebook does not exist.
    """
    if not notebook_path.exists():
        raise FileNotFoundError(f"Notebook not found: {notebook_path}")

    notebook = nbformat.read(str(notebook_path), as_version=4)

    cells: list[SubmissionCell] = []
    for cell in notebook.cells:
        if cell.get("cell_type") != "code":
            continue
        output = "".join(_output_text(o) for o in cell.get("outputs", []))
        cells.append(SubmissionCell(content=cell.get("source", ""), output=output))

    LOG.debug("Loaded %d code cells from %s", len(cells), notebook_path)
    return cells


def load_test_cases_file(path: Path) -> list[TestCase]:
    """
    Load test cases from a YAML or JSON file.

    The file holds either a list of test cases or a mapping with a
    `test_cases` list. Test cases are ordered by cell index; test cases on
    the same cell keep their file order.

    Args:
        path: Path to the test-case file.

    Returns:
        List of TestCase objects.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file type or structure is not supported.
        ValidationError: If a test case is invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Test case file not found: {path}")

    suffix = path.suffix.lower()
    if suffix not in TEST_CASE_FILE_EXTENSIONS:
        raise ValueError(f"Unsupported test case file type: {path.suffix}")

    text = path.read_text(encoding="utf-8")
    data = json.loads(text) if suffix == ".json" else yaml.safe_load(text)

    if isinstance(data, dict):
        data = data.get("test_cases")
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of test cases in {path}")

    test_cases = []
    for i, item in enumerate(data):
        test_case = TestCase.model_validate(item)
        if not test_case.id:
            test_case = test_case.model_copy(update={"id": f"{path.stem}-{i + 1}"})
        test_cases.append(test_case)

    return sorted(test_cases, key=lambda tc: tc.cell_index)
