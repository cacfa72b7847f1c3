import pytest

from mysql_schema_diff.config import MysqlSettings, Settings


MYSQL_ENV_VARS = ['MYSQL_HOST', 'MYSQL_PORT', 'MYSQL_USER', 'MYSQL_PASSWORD', 'MYSQL_CHARSET']


@pytest.fixture(autouse=True)
def clean_mysql_env(monkeypatch):
    for name in MYSQL_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / 'config.yaml'
    path.write_text(
        "mysql:\n"
        "  host: mysql.local\n"
        "  port: 3306\n"
        "  user: mysql_user\n"
        "  password: mysql_pass\n"
        "  charset: utf8mb4\n"
        "tables: ['users', 'orders*']\n"
        "exclude_tables: 'orders_tmp'\n"
        "log_level: debug\n"
        "output: migration.sql\n"
    )
    return path


def test_load_config(config_file):
    settings = Settings()
    settings.load(str(config_file))

    assert settings.mysql.host == 'mysql.local'
    assert settings.mysql.port == 3306
    assert settings.mysql.user == 'mysql_user'
    assert settings.mysql.password == 'mysql_pass'
    assert settings.mysql.charset == 'utf8mb4'
    assert settings.log_level == 'debug'
    assert settings.output == 'migration.sql'


def test_defaults_without_config_file():
    settings = Settings()
    settings.load()

    assert settings.mysql == MysqlSettings()
    assert settings.tables == '*'
    assert settings.log_level == 'info'
    assert settings.output == ''


def test_env_vars_override_config(config_file, monkeypatch):
    monkeypatch.setenv('MYSQL_HOST', 'mysql.env.host')
    monkeypatch.setenv('MYSQL_PORT', '8306')
    monkeypatch.setenv('MYSQL_PASSWORD', 'env_mysql_pass')

    settings = Settings()
    settings.load(str(config_file))

    assert settings.mysql.host == 'mysql.env.host'
    assert settings.mysql.port == 8306
    assert settings.mysql.user == 'mysql_user'
    assert settings.mysql.password == 'env_mysql_pass'


def test_env_vars_without_config_file(monkeypatch):
    monkeypatch.setenv('MYSQL_USER', 'env_mysql_user')

    settings = Settings()
    settings.load()

    assert settings.mysql.user == 'env_mysql_user'
    assert settings.mysql.host == 'localhost'


def test_bad_env_port(monkeypatch):
    monkeypatch.setenv('MYSQL_PORT', 'not-a-port')
    with pytest.raises(ValueError, match='MYSQL_PORT'):
        Settings().load()


@pytest.mark.parametrize("content,message", [
    ("databases: app\n", "Unsupported config options"),
    ("log_level: verbose\n", "wrong log level"),
    ("mysql:\n  port: '3306'\n", "mysql port should be int"),
    ("mysql:\n  socket: /tmp/mysql.sock\n", "wrong mysql settings"),
    ("tables: 5\n", "tables should be string or list"),
])
def test_invalid_config(tmp_path, content, message):
    path = tmp_path / 'config.yaml'
    path.write_text(content)
    with pytest.raises(ValueError, match=message):
        Settings().load(str(path))


@pytest.mark.parametrize("table_name,matches", [
    ('users', True),
    ('orders', True),
    ('orders_2024', True),
    ('orders_tmp', False),
    ('audit', False),
])
def test_table_filter(config_file, table_name, matches):
    settings = Settings()
    settings.load(str(config_file))
    assert settings.is_table_matches(table_name) is matches


def test_connection_config():
    mysql_settings = MysqlSettings(host='db', port=3307, user='u', password='p', collation='utf8mb4_general_ci')
    assert mysql_settings.get_connection_config(database='app') == {
        'host': 'db',
        'port': 3307,
        'user': 'u',
        'password': 'p',
        'connection_timeout': 10,
        'database': 'app',
        'collation': 'utf8mb4_general_ci',
    }
