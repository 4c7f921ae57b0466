import json
import os
import threading
from pathlib import Path
from typing import Any, Dict, Union


GREETER_HOST_ENV = "GREETER_HOST"
GREETER_PORT_ENV = "GREETER_PORT"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8080

_LOG_LOCK = threading.Lock()


def get_host() -> str:
    # explicit environment wins over the built-in default
    host = os.environ.get(GREETER_HOST_ENV)
    if host:
        return host
    return DEFAULT_HOST


def get_port() -> int:
    raw = os.environ.get(GREETER_PORT_ENV)
    if not raw:
        return DEFAULT_PORT
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{GREETER_PORT_ENV} must be an integer, got {raw!r}") from None


def write_log(path: Union[str, Path], record: Dict[str, Any]) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    line = json.dumps(record, sort_keys=True)
    with _LOG_LOCK:
        with path.open("a", encoding="utf-8") as f:
            f.write(line)
            f.write("\n")


def read_log(path: Union[str, Path]) -> list:
    path = Path(path)
    if not path.exists():
        return []
    with path.open("r", encoding="utf-8") as f:
        return [json.loads(line) for line in f if line.strip()]
