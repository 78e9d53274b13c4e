import sqlite3
import logging
from typing import Literal, Optional

from pydantic import BaseModel

from minifactory.builder import DOLLAR, QMARK, QueryBuilder

POSTGRES_DRIVER_PREFIXES = ("psycopg", "pg8000", "asyncpg", "pq")


class EngineConfig(BaseModel):
    db_path: str = ":memory:"
    paramstyle: Optional[Literal["qmark", "dollar"]] = None
    echo: bool = False


def driver_name_of(connection):
    cls = type(connection)
    return f"{cls.__module__}.{cls.__name__}"


def detect_paramstyle(driver_name):
    if driver_name.lower().startswith(POSTGRES_DRIVER_PREFIXES):
        return DOLLAR
    return QMARK


class DatabaseEngine:
    """Persistence handle passed to ``create`` and ``delete`` calls.

    Opens a transactional sqlite connection on ``db_path`` unless an open
    DB-API ``connection`` is given.
    """

    logger = logging.getLogger("minifactory.database")

    def __init__(self, db_path=":memory:", connection=None, paramstyle=None, echo=False, config=None):
        self.config = config or EngineConfig(db_path=db_path, paramstyle=paramstyle, echo=echo)
        self._owns_connection = connection is None
        if connection is None:
            connection = sqlite3.connect(self.config.db_path, check_same_thread=False)
        self.connection = connection
        self.driver_name = driver_name_of(connection)
        self.paramstyle = self.config.paramstyle or detect_paramstyle(self.driver_name)
        self.query_builder = QueryBuilder(self.paramstyle)

    def __repr__(self):
        return f"<DatabaseEngine driver={self.driver_name} paramstyle={self.paramstyle}>"

    def _log(self, sql, params=None):
        msg = f"[SQL EXECUTE]: {sql}"
        if params:
            msg += f" | [PARAMS]: {params}"
        if self.config.echo:
            self.logger.info(msg)
        else:
            self.logger.debug(msg)

    def execute(self, sql, params=None):
        self._log(sql, params)
        cursor = self.connection.cursor()
        try:
            cursor.execute(sql, tuple(params or ()))
            if cursor.description is None:
                return []
            return cursor.fetchall()
        finally:
            cursor.close()

    def fetch_one(self, sql, params=None):
        self._log(sql, params)
        cursor = self.connection.cursor()
        try:
            cursor.execute(sql, tuple(params or ()))
            return cursor.fetchone()
        finally:
            cursor.close()

    def execute_insert(self, sql, params=None):
        self._log(sql, params)
        cursor = self.connection.cursor()
        try:
            cursor.execute(sql, tuple(params or ()))
            return getattr(cursor, "lastrowid", None)
        finally:
            cursor.close()

    def commit(self):
        self.connection.commit()

    def rollback(self):
        self.connection.rollback()

    def close(self):
        if self._owns_connection:
            self.connection.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
