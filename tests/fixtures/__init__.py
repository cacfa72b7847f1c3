"""Test fixtures for mysql-schema-diff tests"""

from .table_schemas import TableSchema, TableSchemas

__all__ = [
    "TableSchema",
    "TableSchemas",
]
