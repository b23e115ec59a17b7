"""
Loading of workflow and manifest documents.

Both loaders read the file once, parse it and wrap the result in a read-only
document tree. Any failure here is a setup error: nothing can be checked
without the documents.
"""

import json
import logging
from pathlib import Path
from typing import Any, Union

import yaml

from pipecheck.commands.document import (
    ManifestDocument,
    Node,
    WorkflowDocument,
    build_tree,
)
from pipecheck.commands.errors import ParseError, SetupError

logger = logging.getLogger(__name__)


def _read_text(path: Union[str, Path], kind: str) -> str:
    file_path = Path(path)
    try:
        return file_path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise SetupError(
            f"{kind} file not found: {file_path}",
            config_file=str(file_path),
            code="FILE_NOT_FOUND",
        ) from e
    except UnicodeDecodeError as e:
        raise ParseError(
            f"{kind} file {file_path} is not valid UTF-8: {e}",
            config_file=str(file_path),
        ) from e
    except OSError as e:
        raise SetupError(
            f"Failed to read {kind.lower()} file {file_path}: {e}",
            config_file=str(file_path),
        ) from e


def _to_tree(data: dict, path: Union[str, Path], kind: str) -> Node:
    try:
        return build_tree(data)
    except RecursionError as e:
        raise ParseError(
            f"{kind} file {path} is nested too deeply", config_file=str(path)
        ) from e
    except ParseError as e:
        raise ParseError(
            f"{kind} file {path}: {e.message}",
            config_file=str(path),
            details=dict(e.details),
        ) from e


def _require_mapping(data: Any, path: Union[str, Path], kind: str) -> dict:
    if not isinstance(data, dict):
        raise ParseError(
            f"{kind} file {path} must contain a mapping at the top level "
            f"(got {type(data).__name__})",
            config_file=str(path),
        )
    return data


def normalize_workflow_keys(data: dict) -> dict:
    """
    Restore the `on` key that YAML 1.1 reads as boolean True.

    An unquoted `on:` is parsed by PyYAML as the boolean True. Only the
    top-level key is rewritten; a quoted "on" key wins if both are present.
    """
    triggers = [value for key, value in data.items() if key is True]
    if not triggers:
        return data
    normalized = {key: value for key, value in data.items() if key is not True}
    normalized.setdefault("on", triggers[0])
    return normalized


def load_workflow_document(path: Union[str, Path]) -> WorkflowDocument:
    """
    Load and parse a CI workflow YAML file.

    Args:
        path: Path to the workflow file

    Returns:
        The parsed, read-only workflow document

    Raises:
        SetupError: If the file does not exist or cannot be read
        ParseError: If the content is not valid YAML or not a mapping
    """
    text = _read_text(path, "Workflow")
    try:
        data = yaml.safe_load(text)
    except RecursionError as e:
        raise ParseError(
            f"Workflow file {path} is nested too deeply", config_file=str(path)
        ) from e
    except yaml.YAMLError as e:
        raise ParseError(
            f"Invalid YAML in workflow file {path}: {e}", config_file=str(path)
        ) from e

    data = normalize_workflow_keys(_require_mapping(data, path, "Workflow"))
    logger.debug("Loaded workflow %s with top-level keys %s", path, list(data))
    return WorkflowDocument(_to_tree(data, path, "Workflow"), source=str(path))


def load_manifest(path: Union[str, Path]) -> ManifestDocument:
    """
    Load and parse a package manifest (package.json).

    Raises:
        SetupError: If the file does not exist or cannot be read
        ParseError: If the content is not valid JSON or not an object
    """
    text = _read_text(path, "Manifest")
    try:
        data = json.loads(text)
    except RecursionError as e:
        raise ParseError(
            f"Manifest file {path} is nested too deeply", config_file=str(path)
        ) from e
    except json.JSONDecodeError as e:
        raise ParseError(
            f"Invalid JSON in manifest file {path}: {e}", config_file=str(path)
        ) from e

    data = _require_mapping(data, path, "Manifest")
    logger.debug("Loaded manifest %s with top-level keys %s", path, list(data))
    return ManifestDocument(_to_tree(data, path, "Manifest"), source=str(path))
