"""YAML configuration loading.

Access level seed files and other deployment-time documents are plain YAML
mappings. Environment variables inside string values are expanded on load.
"""

import os
from pathlib import Path
from typing import Any, Dict, List

import yaml


def load_config(config_path: str) -> Dict[str, Any]:
    """Load a YAML document that must be a mapping at the root.

    Args:
        config_path: Path to the YAML file

    Returns:
        Configuration dictionary (empty for an empty file)

    Raises:
        FileNotFoundError: If the file doesn't exist
        TypeError: If the document root is not a mapping
        yaml.YAMLError: If the file is not valid YAML
    """
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with config_file.open("r") as f:
        config = yaml.safe_load(f)

    if config is None:
        config = {}

    if not isinstance(config, dict):
        raise TypeError(
            f"Configuration root must be a mapping, got {type(config).__name__}"
        )

    return _expand_env_vars(config)


def _expand_env_vars(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {key: _expand_env_vars(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    elif isinstance(obj, str):
        return os.path.expandvars(obj)
    else:
        return obj


def load_access_level_documents(config_path: str) -> List[Dict[str, Any]]:
    """Read the ``access_levels`` list from a seed file.

    Entries that are not mappings are dropped here; field-level validation
    happens when the documents are parsed into access levels.

    Raises:
        TypeError: If ``access_levels`` is present but is not a list
    """
    config = load_config(config_path)
    documents = config.get("access_levels", [])
    if documents is None:
        return []
    if not isinstance(documents, list):
        raise TypeError(
            f"'access_levels' must be a list, got {type(documents).__name__}"
        )
    return [doc for doc in documents if isinstance(doc, dict)]
