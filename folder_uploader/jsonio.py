# folder_uploader/jsonio.py
from __future__ import annotations
import json, logging, sys
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

def enable_json_logging():
    """Send logs to stderr and suppress info noise when emitting JSON to stdout."""
    # Drop existing handlers to avoid duplicate logs
    for h in logging.root.handlers[:]:
        logging.root.removeHandler(h)
    logging.basicConfig(stream=sys.stderr, level=logging.ERROR)

def _default(obj: Any):
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (set, frozenset)):
        return sorted(obj)
    if isinstance(obj, Path):
        return str(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")

def _emit(payload: Dict[str, Any]) -> None:
    # Always print JSON to stdout, logs go to stderr
    print(json.dumps(payload, ensure_ascii=False, default=_default), file=sys.stdout)
    sys.stdout.flush()

def success(command: str, data: Dict[str, Any] | list | None = None,
            meta: Optional[Dict[str, Any]] = None, code: int = 0) -> int:
    payload = {"result": "success", "command": command, "data": data if data is not None else {}}
    if meta:
        payload["meta"] = meta
    _emit(payload)
    return code

def error(command: str, message: str, debug: Optional[Dict[str, Any]] = None, code: int = 1) -> int:
    payload = {"result": "error", "command": command, "error": message}
    if debug:
        payload["debug"] = debug
    _emit(payload)
    return code
