import importlib.metadata

from .diff_extractor import DuplicateIdentifierError, extract_diff
from .main import main
from .schema_parser import SchemaParseError, parse_schema, parse_table
from .table_structure import Column, OrdinaryKey, Table, UniqueKey

try:
    __version__ = importlib.metadata.version("mysql-schema-diff")
except importlib.metadata.PackageNotFoundError:
    __version__ = "unknown"  # fallback version
