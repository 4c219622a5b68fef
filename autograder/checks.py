"""
Textual heuristics used to decide whether a test case passes.

These are pattern matches over cell source and output, not a parser.
Comments and string literals can produce false positives or negatives.
"""

import re

from pydantic import TypeAdapter, ValidationError

from .errors import InvalidTestConfigError, UnknownTestTypeError
from .models import (
    CodeContainsConfig,
    FunctionExistsConfig,
    OutputMatchConfig,
    TestCase,
    TestConfig,
    TestType,
    VariableValueConfig,
)

_CONFIG_ADAPTER: TypeAdapter = TypeAdapter(TestConfig)
_KNOWN_TYPES: set[str] = {t.value for t in TestType}


def output_matches(output: str, expected: str, exact: bool) -> bool:
    """
    Check a cell's output against the expected output.

    Exact matching compares the trimmed strings case-sensitively. Otherwise
    the expected text must appear anywhere in the output, ignoring case.
    """
    if exact:
        return output.strip() == expected.strip()
    return expected.lower() in output.lower()


def code_contains(content: str, fragment: str) -> bool:
    return fragment.lower() in content.lower()


def function_exists(content: str, function_name: str) -> bool:
    """
    Look for a `def <name>(` definition in the cell source.

    The name must be followed by optional whitespace and an opening
    parenthesis, so `add` does not match `def addition(`.
    """
    pattern = re.compile(rf"def\s+{re.escape(function_name)}\s*\(", re.IGNORECASE)
    return pattern.search(content) is not None


def variable_value_present(content: str, output: str, variable_name: str, expected_value: str) -> bool:
    """
    Look for the variable name followed later on the same line by the value.

    Output and source are searched independently; a match in either passes.
    """
    pattern = re.compile(
        rf"{re.escape(variable_name)}.*{re.escape(expected_value)}",
        re.IGNORECASE,
    )
    return pattern.search(output) is not None or pattern.search(content) is not None


def parse_test_config(test_case: TestCase):
    """
    Resolve a test case's raw configuration into its typed variant.

    Args:
        test_case: Test case as authored.

    Returns:
        One of the TestConfig variant models.

    Raises:
        UnknownTestTypeError: If the test type is not one of TestType.
        InvalidTestConfigError: If required configuration fields are missing or invalid.
    """
    if test_case.test_type not in _KNOWN_TYPES:
        raise UnknownTestTypeError(test_case.test_type)
    if not isinstance(test_case.test_config, dict):
        raise InvalidTestConfigError(test_case.test_type, ["test_config: expected an object"])

    payload = {**test_case.test_config, "test_type": test_case.test_type}
    try:
        return _CONFIG_ADAPTER.validate_python(payload)
    except ValidationError as e:
        problems = [
            f"{'.'.join(str(part) for part in err['loc'][1:]) or 'test_config'}: {err['msg']}"
            for err in e.errors()
        ]
        raise InvalidTestConfigError(test_case.test_type, problems) from e


def run_check(config, content: str, output: str) -> tuple[bool, str]:
    """
    Run one typed check against a cell.

    Args:
        config: Typed configuration returned by parse_test_config.
        content: Cell source.
        output: Cell output.

    Returns:
        Tuple of (passed, message).
    """
    if isinstance(config, OutputMatchConfig):
        passed = output_matches(output, config.expected_output, config.exact_match)
        if passed:
            return True, "Output matches expected result"
        return False, f'Expected output containing: "{config.expected_output}", got: "{output}"'

    if isinstance(config, CodeContainsConfig):
        if code_contains(content, config.contains):
            return True, f'Code contains required pattern: "{config.contains}"'
        return False, f'Code should contain: "{config.contains}"'

    if isinstance(config, FunctionExistsConfig):
        if function_exists(content, config.function_name):
            return True, f'Function "{config.function_name}" found'
        return False, f'Function "{config.function_name}" not found'

    if isinstance(config, VariableValueConfig):
        if variable_value_present(content, output, config.variable_name, config.expected_value):
            return True, f'Variable "{config.variable_name}" has correct value'
        return False, f'Variable "{config.variable_name}" should equal "{config.expected_value}"'

    raise TypeError(f"Unsupported test configuration: {type(config).__name__}")
