from unittest import mock

import pytest

from mysql_schema_diff import schema_loader
from mysql_schema_diff.config import Settings
from mysql_schema_diff.schema_loader import (
    is_database_source,
    load_schema,
    load_schema_from_database,
    load_schema_from_file,
)
from tests.fixtures.table_schemas import TableSchemas


@pytest.fixture
def settings(monkeypatch):
    for name in ['MYSQL_HOST', 'MYSQL_PORT', 'MYSQL_USER', 'MYSQL_PASSWORD', 'MYSQL_CHARSET']:
        monkeypatch.delenv(name, raising=False)
    settings = Settings()
    settings.load()
    return settings


@pytest.fixture
def schema_file(tmp_path):
    path = tmp_path / 'schema.sql'
    path.write_text(
        TableSchemas.users_table().sql + ';\n\n'
        + TableSchemas.orders_table().sql + ';\n',
        encoding='utf-8',
    )
    return path


@pytest.mark.parametrize("source,expected", [
    ('db:app', True),
    ('schema.sql', False),
    ('./db:app.sql', False),
])
def test_is_database_source(source, expected):
    assert is_database_source(source) is expected


def test_load_schema_from_file(schema_file):
    tables = load_schema_from_file(schema_file)
    assert [t.name for t in tables] == ['users', 'orders']


def test_load_schema_applies_table_filter(schema_file, settings):
    settings.exclude_tables = 'ord*'
    tables = load_schema(str(schema_file), settings)
    assert [t.name for t in tables] == ['users']


def test_load_schema_missing_file(tmp_path, settings):
    with pytest.raises(FileNotFoundError):
        load_schema(str(tmp_path / 'missing.sql'), settings)


def test_load_schema_from_database():
    mysql_api = mock.Mock()
    mysql_api.database = 'app'
    mysql_api.get_tables.return_value = ['users', 'orders', 'tmp_import']
    mysql_api.get_table_create_statements.side_effect = lambda names: {
        'users': TableSchemas.users_table().sql,
        'orders': TableSchemas.orders_table().sql,
    }

    settings = Settings()
    settings.exclude_tables = 'tmp_*'

    tables = load_schema_from_database(mysql_api, settings)

    mysql_api.get_table_create_statements.assert_called_once_with(['users', 'orders'])
    assert [t.name for t in tables] == ['users', 'orders']


def test_load_schema_database_source(settings):
    with mock.patch.object(schema_loader, 'MySQLApi') as api_class, \
            mock.patch.object(schema_loader, 'load_schema_from_database', return_value=[]) as load:
        assert load_schema('db:app_production', settings) == []

    api_class.assert_called_once_with(database='app_production', mysql_settings=settings.mysql)
    load.assert_called_once_with(api_class.return_value, settings)


def test_load_schema_database_source_without_name(settings):
    with pytest.raises(ValueError, match='missing database name'):
        load_schema('db:', settings)
