__version__ = "0.1.0"

from .runtime import Greeting, GreetingHandler, RequestCounter  # noqa: E402

__all__ = ["Greeting", "GreetingHandler", "RequestCounter", "__version__"]
