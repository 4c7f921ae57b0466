import threading
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


TEMPLATE = "Hello, %s!"
DEFAULT_NAME = "World"


@dataclass(frozen=True)
class Greeting:
    id: int
    content: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class RequestCounter:
    """Thread-safe monotonically increasing counter."""

    def __init__(self, start: int = 0):
        self._lock = threading.Lock()
        self._value = int(start)

    def increment_and_get(self) -> int:
        with self._lock:
            self._value += 1
            return self._value

    @property
    def value(self) -> int:
        with self._lock:
            return self._value


class GreetingHandler:
    def __init__(self, counter: Optional[RequestCounter] = None):
        self.counter = counter if counter is not None else RequestCounter()

    def handle(self, name: Optional[str] = None) -> Greeting:
        if name is None:
            name = DEFAULT_NAME
        # name is passed as an argument, so "%s" or "{}" inside it stay literal
        return Greeting(id=self.counter.increment_and_get(), content=TEMPLATE % (name,))
