# API Routes Module
from subtrack.api.routes import jobs

__all__ = [
    "jobs",
]
