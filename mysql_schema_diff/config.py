"""
mysql-schema-diff configuration

Settings are read from an optional YAML file and can be overridden by
environment variables for the MySQL connection (MYSQL_HOST, MYSQL_PORT,
MYSQL_USER, MYSQL_PASSWORD, MYSQL_CHARSET).

Classes:
    MysqlSettings: connection parameters used when a schema is read from a live database
    Settings: table filters, log level, output path and the MySQL settings

Example config.yaml:

    mysql:
      host: localhost
      port: 3306
      user: root
      password: admin
    tables: "*"
    exclude_tables: ["tmp_*"]
    log_level: info
    output: migration.sql
"""

import fnmatch
import os
from dataclasses import dataclass

import yaml


def stype(obj):
    """Get the simple type name of an object.

    Example:
        >>> stype([1, 2, 3])
        'list'
    """
    return type(obj).__name__


@dataclass
class MysqlSettings:
    host: str = "localhost"
    port: int = 3306
    user: str = "root"
    password: str = ""
    charset: str = None
    collation: str = None
    connection_timeout: int = 10

    def validate(self):
        if not isinstance(self.host, str):
            raise ValueError(f"mysql host should be string and not {stype(self.host)}")

        if not isinstance(self.port, int):
            raise ValueError(f"mysql port should be int and not {stype(self.port)}")

        if not isinstance(self.user, str):
            raise ValueError(f"mysql user should be string and not {stype(self.user)}")

        if not isinstance(self.password, str):
            raise ValueError(
                f"mysql password should be string and not {stype(self.password)}"
            )

        if self.charset is not None and not isinstance(self.charset, str):
            raise ValueError(
                f"mysql charset should be string or None and not {stype(self.charset)}"
            )

        if self.collation is not None and not isinstance(self.collation, str):
            raise ValueError(
                f"mysql collation should be string or None and not {stype(self.collation)}"
            )

        if not isinstance(self.connection_timeout, int) or self.connection_timeout <= 0:
            raise ValueError("mysql connection_timeout should be at least 1 second")

    def get_connection_config(self, database=None):
        """Build keyword arguments for mysql.connector.connect"""
        config = {
            "host": self.host,
            "port": self.port,
            "user": self.user,
            "password": self.password,
            "connection_timeout": self.connection_timeout,
        }

        if database is not None:
            config["database"] = database

        if self.charset is not None:
            config["charset"] = self.charset

        if self.collation is not None:
            config["collation"] = self.collation

        return config


MYSQL_ENV_VARS = {
    "MYSQL_HOST": ("host", str),
    "MYSQL_PORT": ("port", int),
    "MYSQL_USER": ("user", str),
    "MYSQL_PASSWORD": ("password", str),
    "MYSQL_CHARSET": ("charset", str),
}


class Settings:
    DEFAULT_LOG_LEVEL = "info"

    def __init__(self):
        self.mysql = MysqlSettings()
        self.tables = "*"
        self.exclude_tables = ""
        self.log_level = Settings.DEFAULT_LOG_LEVEL
        self.output = ""

    def load(self, settings_file=None):
        data = {}
        if settings_file:
            with open(settings_file, "r") as f:
                data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"config should be a mapping and not {stype(data)}")

        try:
            self.mysql = MysqlSettings(**(data.pop("mysql", None) or {}))
        except TypeError as e:
            raise ValueError(f"wrong mysql settings: {e}")
        self.tables = data.pop("tables", "*")
        self.exclude_tables = data.pop("exclude_tables", "")
        self.log_level = data.pop("log_level", Settings.DEFAULT_LOG_LEVEL)
        self.output = data.pop("output", "") or ""

        if data:
            raise ValueError(f"Unsupported config options: {list(data.keys())}")

        self.apply_env_overrides()
        self.validate()

    def apply_env_overrides(self):
        for env_name, (attr, attr_type) in MYSQL_ENV_VARS.items():
            value = os.environ.get(env_name)
            if value is None:
                continue
            try:
                value = attr_type(value)
            except ValueError:
                raise ValueError(f"{env_name} should be {attr_type.__name__}, got {value!r}")
            setattr(self.mysql, attr, value)

    @classmethod
    def is_pattern_matches(cls, substr, pattern):
        if not pattern or pattern == "*":
            return True
        if isinstance(pattern, str):
            return fnmatch.fnmatch(substr, pattern)
        if isinstance(pattern, list):
            for allowed_pattern in pattern:
                if fnmatch.fnmatch(substr, allowed_pattern):
                    return True
            return False
        raise ValueError(f"wrong pattern {pattern}")

    def is_table_matches(self, table_name):
        if self.exclude_tables and self.is_pattern_matches(
            table_name, self.exclude_tables
        ):
            return False
        return self.is_pattern_matches(table_name, self.tables)

    def validate_log_level(self):
        if self.log_level not in ["critical", "error", "warning", "info", "debug"]:
            raise ValueError(f"wrong log level {self.log_level}")

    def validate(self):
        self.mysql.validate()
        self.validate_log_level()
        for name in ("tables", "exclude_tables"):
            value = getattr(self, name)
            if not isinstance(value, (str, list)):
                raise ValueError(f"{name} should be string or list and not {stype(value)}")
        if not isinstance(self.output, str):
            raise ValueError(f"output should be string and not {stype(self.output)}")
