from __future__ import annotations

from pathlib import Path
from typing import Any

import orjson
from blake3 import blake3

from .errors import InputError


def canonical_dumps(data: Any) -> bytes:
    return orjson.dumps(data, option=orjson.OPT_SORT_KEYS)


def stable_hash(data: Any) -> str:
    return blake3(canonical_dumps(data)).hexdigest()


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def read_json(path: Path) -> Any:
    try:
        return orjson.loads(path.read_bytes())
    except OSError as exc:
        raise InputError(f"could not read '{path}': {exc}") from exc
    except orjson.JSONDecodeError as exc:
        raise InputError(f"could not parse '{path}' as JSON: {exc}") from exc


def loads_json(data: bytes, source: str) -> Any:
    try:
        return orjson.loads(data)
    except orjson.JSONDecodeError as exc:
        raise InputError(f"could not parse '{source}' as JSON: {exc}") from exc


def write_text(path: Path, text: str) -> None:
    ensure_dir(path.parent)
    path.write_text(text, encoding="utf-8")
