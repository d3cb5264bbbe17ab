"""Token management and request execution."""

from .oauth import TokenManager
from .executor import RequestExecutor

__all__ = ["TokenManager", "RequestExecutor"]
