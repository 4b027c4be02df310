"""
HTTP Routers
============
"""

from .otp import create_otp_router
from .candidates import create_candidates_router, generate_candidate_id

__all__ = [
    "create_otp_router",
    "create_candidates_router",
    "generate_candidate_id",
]
