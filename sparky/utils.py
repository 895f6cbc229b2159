"""File I/O and rounding helpers shared by the store, config and report."""

import json
import logging
import math
import os
import tempfile
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

T = TypeVar('T', bound=BaseModel)
logger = logging.getLogger('sparky.utils')


def load_json(path: Path | str, schema: type[T] | None = None) -> Any | T:
    """
    Read a JSON file, optionally validating it into a pydantic model.

    Args:
        path: File to read
        schema: Model to validate against (e.g. DailyRecord, LeagueConfig)

    Returns:
        The parsed JSON, or a schema instance when one is given

    Raises:
        FileNotFoundError: If the file doesn't exist
        json.JSONDecodeError: If the file is not valid JSON
        ValueError: If schema validation fails
    """
    path = Path(path)
    if not path.is_file():
        logger.error(f'File not found: {path}')
        raise FileNotFoundError(f'File not found: {path}')

    try:
        data = json.loads(path.read_text(encoding='utf-8'))
    except json.JSONDecodeError as e:
        logger.error(f'Invalid JSON in {path.name}: {e.msg} (line {e.lineno})')
        raise

    if schema is None:
        return data
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        logger.error(f'{path.name} does not match {schema.__name__}: {e.error_count()} error(s)')
        raise ValueError(f'{path} failed {schema.__name__} validation:\n{e}') from e


def to_jsonable(data: Any) -> Any:
    """Dump pydantic models by alias (camelCase on disk); pass anything else through."""
    if isinstance(data, BaseModel):
        return data.model_dump(mode='json', by_alias=True, exclude_none=True)
    return data


def save_json(path: Path | str, data: Any, indent: int = 2) -> Path:
    """
    Write data as JSON, replacing the target atomically.

    The payload goes to a temp file beside the target first, so a reader
    (the render step, a concurrent analysis run) never sees a half-written
    daily or analysis file. Parent directories are created as needed.

    Returns:
        The path written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps(to_jsonable(data), indent=indent, ensure_ascii=False)

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f'.{path.stem}.', suffix='.tmp')
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            f.write(payload)
        os.replace(tmp_name, path)
    except OSError as e:
        logger.error(f'Failed to write {path}: {e}')
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.debug(f'Wrote {path}')
    return path


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def pct_change(value: float, baseline: float) -> int:
    """Whole-number percent change of value relative to a positive baseline."""
    return round_half_up((value - baseline) / baseline * 100)
