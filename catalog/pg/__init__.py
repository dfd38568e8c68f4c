"""
PostgreSQL infrastructure - connection client and error translation.
"""

from .client import CONSTRUCT_TIMEOUT, PgClient
from .errors import storage_errors, translate_error

__all__ = ["CONSTRUCT_TIMEOUT", "PgClient", "storage_errors", "translate_error"]
