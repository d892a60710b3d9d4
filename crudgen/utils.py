"""Functions for loading entity descriptions.

An entity description is a JSON object with a ``name``, a list of
``fields`` and optional ``plural_name``/``update_policy`` keys. It can be
read from a local file, fetched from a URL or parsed from a string.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union
from urllib.parse import urlparse

import requests

from .codegen.core.errors import ConfigurationError
from .codegen.core.schema import EntitySpec
from .logging_config import get_logger

logger = get_logger(__name__)


class EntityLoaderError(Exception):
    """Raised when an entity description cannot be read or parsed."""

    pass


def _check_entity_data(data: Any, source: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise EntityLoaderError(
            f"Entity description in {source} must be a JSON object, "
            f"got {type(data).__name__}"
        )
    if "name" not in data:
        raise EntityLoaderError(f"Entity description in {source} has no 'name'")
    if not isinstance(data.get("fields", []), list):
        raise EntityLoaderError(f"'fields' in {source} must be a list")
    for index, item in enumerate(data.get("fields", [])):
        if not isinstance(item, dict):
            raise EntityLoaderError(f"Field #{index + 1} in {source} must be a JSON object")
    return data


def load_entity_from_file(file_path: Union[str, Path]) -> Tuple[str, Dict[str, Any]]:
    """Load an entity description from a local file.

    Args:
        file_path: Path to the JSON file.

    Returns:
        Tuple of (source description, parsed JSON object).

    Raises:
        EntityLoaderError: If the file is missing, unreadable or not valid JSON.
    """
    file_path = Path(file_path)
    logger.debug("Loading entity from file: %s", file_path)

    if not file_path.exists():
        raise EntityLoaderError(f"File not found: {file_path}")

    if file_path.suffix.lower() != ".json":
        logger.warning("File does not have .json extension: %s", file_path)

    try:
        with file_path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise EntityLoaderError(f"Invalid JSON in file {file_path}: {e}") from e
    except OSError as e:
        raise EntityLoaderError(f"Error reading file {file_path}: {e}") from e

    return str(file_path), _check_entity_data(data, str(file_path))


def load_entity_from_url(url: str, timeout: int = 30) -> Tuple[str, Dict[str, Any]]:
    """Fetch an entity description over HTTP(S).

    Raises:
        EntityLoaderError: If the URL is invalid, the request fails or the
            response is not a JSON object.
    """
    logger.debug("Loading entity from URL: %s", url)

    parsed_url = urlparse(url)
    if not all([parsed_url.scheme, parsed_url.netloc]):
        raise EntityLoaderError(f"Invalid URL: {url}")

    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        data = response.json()
    except requests.exceptions.Timeout as e:
        raise EntityLoaderError(f"Request timeout for URL: {url}") from e
    except requests.exceptions.ConnectionError as e:
        raise EntityLoaderError(f"Connection error for URL: {url}") from e
    except requests.exceptions.HTTPError as e:
        raise EntityLoaderError(
            f"HTTP error {e.response.status_code} for URL: {url}"
        ) from e
    except requests.exceptions.RequestException as e:
        raise EntityLoaderError(f"Request error for URL {url}: {e}") from e
    except ValueError as e:
        raise EntityLoaderError(f"Invalid JSON response from URL {url}: {e}") from e

    return url, _check_entity_data(data, url)


def load_entity_from_string(text: str, source: str = "<string>") -> Tuple[str, Dict[str, Any]]:
    """Parse an entity description from JSON text."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise EntityLoaderError(f"Invalid JSON in {source}: {e}") from e
    return source, _check_entity_data(data, source)


def load_entity(
    file_path: Optional[Union[str, Path]] = None,
    url: Optional[str] = None,
    text: Optional[str] = None,
    timeout: int = 30,
) -> Tuple[str, EntitySpec]:
    """Load an entity from exactly one of a file, a URL or a JSON string.

    Args:
        file_path: Path to a local JSON file.
        url: URL to fetch the description from.
        text: JSON text.
        timeout: Request timeout in seconds (only used for URLs).

    Returns:
        Tuple of (source description, EntitySpec). The entity is parsed but
        not validated.

    Raises:
        EntityLoaderError: If not exactly one source is given, or loading fails.
    """
    given = [s for s in (file_path, url, text) if s is not None]
    if len(given) != 1:
        raise EntityLoaderError("Exactly one of file_path, url or text must be provided")

    if file_path is not None:
        source, data = load_entity_from_file(file_path)
    elif url is not None:
        source, data = load_entity_from_url(url, timeout)
    else:
        source, data = load_entity_from_string(text)

    entity = EntitySpec.from_dict(data)
    logger.info("Loaded entity '%s' (%d field(s)) from %s",
                entity.name, len(entity.fields), source)
    return source, entity


def read_go_module(project_dir: Union[str, Path]) -> Optional[str]:
    """Return the module path declared by ``<project_dir>/go.mod``.

    Returns None when the directory has no go.mod or it has no ``module``
    directive.

    Raises:
        ConfigurationError: If go.mod exists but cannot be read.
    """
    go_mod = Path(project_dir) / "go.mod"
    if not go_mod.is_file():
        return None

    try:
        lines = go_mod.read_text(encoding="utf-8").splitlines()
    except OSError as e:
        raise ConfigurationError(f"Cannot read {go_mod}: {e}") from e

    for line in lines:
        directive = line.split("//", 1)[0].strip()
        parts = directive.split(None, 1)
        if len(parts) == 2 and parts[0] == "module":
            module = parts[1].strip().strip('"`')
            logger.debug("Module path %s read from %s", module, go_mod)
            return module or None
    return None
