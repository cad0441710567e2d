"""HTTP middleware: timeout and request ID.

Applied in main app; order matters (first added = outermost).
"""

from memberdir.middleware.request_id import RequestIDMiddleware
from memberdir.middleware.timeout import TimeoutMiddleware

__all__ = [
    "RequestIDMiddleware",
    "TimeoutMiddleware",
]
