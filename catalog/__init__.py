"""
Catalog Service.

Buildings, companies and hierarchical categories stored in PostgreSQL.
"""

__version__ = "1.0.0"
