"""
Module 'sandbox': backend de développement implémentant les deux endpoints
consommés par le checkout (capture context + charge).
"""

from .service import create_capture_context, charge, parse_amount, build_context_claims

__all__ = [
    "create_capture_context",
    "charge",
    "parse_amount",
    "build_context_claims",
]
