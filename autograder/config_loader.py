"""
Configuration loader for the notebook auto-grader.

Handles parsing and validation of YAML configuration files.
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from .config import DEFAULT_DASHBOARD_PORT, DEFAULT_DATA_DIR, DEFAULT_GRADES_DIR, DEFAULT_HOST, DEFAULT_PORT


class GraderConfig(BaseModel):
    """
    Configuration model for the auto-grader.
    """
    data_dir: Path = Field(DEFAULT_DATA_DIR, description="Directory holding submissions, assignments and test cases")
    grades_dir: Path = Field(DEFAULT_GRADES_DIR, description="Directory for exported gradebooks")
    host: str = Field(DEFAULT_HOST, description="Interface the API listens on")
    port: int = Field(DEFAULT_PORT, ge=1, le=65535, description="Port for the API")
    dashboard_port: int = Field(DEFAULT_DASHBOARD_PORT, ge=1, le=65535, description="Port for the dashboard")
    cors_origins: str | list[str] = Field("*", description="Origins allowed to call the API")
    verbose: bool = Field(False, description="Enable verbose output")


def load_config(config_path: Path) -> GraderConfig:
    """
    Load configuration from a YAML file.

    Relative paths are resolved against the directory of the config file.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        GraderConfig object with loaded values.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        yaml.YAMLError: If config file is invalid YAML.
        ValidationError: If config data is invalid.
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        config_data = yaml.safe_load(f) or {}

    if not isinstance(config_data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {config_path}")

    config_dir = config_path.parent
    for path_field in ["data_dir", "grades_dir"]:
        value = config_data.get(path_field)
        if value:
            path = Path(value)
            if not path.is_absolute():
                config_data[path_field] = config_dir / path
        elif path_field in config_data:
            del config_data[path_field]

    if "data_dir" not in config_data:
        config_data["data_dir"] = config_dir / DEFAULT_DATA_DIR
    if "grades_dir" not in config_data:
        config_data["grades_dir"] = config_dir / DEFAULT_GRADES_DIR

    return GraderConfig(**config_data)
