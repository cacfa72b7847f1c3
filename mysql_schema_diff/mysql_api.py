from contextlib import contextmanager
from logging import getLogger

import mysql.connector
from mysql.connector import Error as MySQLError

from .config import MysqlSettings

logger = getLogger(__name__)


class MySQLApi:
    def __init__(self, database: str, mysql_settings: MysqlSettings):
        self.database = database
        self.mysql_settings = mysql_settings
        logger.debug(
            f"MySQLApi initialized with database '{database}' "
            f"on {mysql_settings.host}:{mysql_settings.port}"
        )

    @contextmanager
    def get_connection(self):
        """Open a connection to the configured database, closed on exit"""
        try:
            connection = mysql.connector.connect(
                **self.mysql_settings.get_connection_config(database=self.database)
            )
        except MySQLError as e:
            logger.error(f"Failed to connect to database '{self.database}': {e}")
            raise
        cursor = connection.cursor()
        try:
            yield connection, cursor
        finally:
            cursor.close()
            connection.close()

    def get_tables(self):
        with self.get_connection() as (connection, cursor):
            cursor.execute("SHOW FULL TABLES")
            res = cursor.fetchall()
            tables = [x[0] for x in res if x[1] == "BASE TABLE"]
            return tables

    def get_table_create_statements(self, table_names) -> dict:
        """Fetch SHOW CREATE TABLE for several tables over one connection"""
        statements = {}
        with self.get_connection() as (connection, cursor):
            for table_name in table_names:
                cursor.execute(f"SHOW CREATE TABLE `{table_name}`")
                res = cursor.fetchall()
                statements[table_name] = res[0][1].strip()
        return statements
