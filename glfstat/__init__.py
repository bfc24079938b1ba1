"""glfstat: shot-by-shot golf round logging with per-round statistics."""

__version__ = "0.31.0"
