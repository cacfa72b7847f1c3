"""
Schema snapshot loading.

A source is either a path to a SQL file (a mysqldump --no-data dump or a
set of SHOW CREATE TABLE statements) or ``db:<database>`` for a live
database reached with the configured MySQL settings.
"""

from logging import getLogger

from .config import Settings
from .mysql_api import MySQLApi
from .schema_parser import parse_schema, parse_table
from .table_structure import Table

logger = getLogger(__name__)

DATABASE_SOURCE_PREFIX = 'db:'


def is_database_source(source: str) -> bool:
    return source.startswith(DATABASE_SOURCE_PREFIX)


def load_schema_from_file(path) -> list[Table]:
    with open(path, 'r', encoding='utf-8') as f:
        sql_text = f.read()
    tables = parse_schema(sql_text)
    logger.info(f'loaded {len(tables)} tables from {path}')
    return tables


def load_schema_from_database(mysql_api: MySQLApi, settings: Settings = None) -> list[Table]:
    table_names = mysql_api.get_tables()
    if settings is not None:
        table_names = [name for name in table_names if settings.is_table_matches(name)]
    create_statements = mysql_api.get_table_create_statements(table_names)
    tables = [parse_table(create_statements[name]) for name in table_names]
    logger.info(f'loaded {len(tables)} tables from database {mysql_api.database}')
    return tables


def load_schema(source: str, settings: Settings) -> list[Table]:
    if is_database_source(source):
        database = source[len(DATABASE_SOURCE_PREFIX):]
        if not database:
            raise ValueError(f'missing database name in source {source!r}')
        mysql_api = MySQLApi(database=database, mysql_settings=settings.mysql)
        return load_schema_from_database(mysql_api, settings)

    tables = load_schema_from_file(source)
    return [table for table in tables if settings.is_table_matches(table.name)]
