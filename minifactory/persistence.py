import logging
from abc import ABC, abstractmethod

from minifactory.errors import PersistenceError

logger = logging.getLogger(__name__)


class Operation(ABC):
    def __init__(self, engine, table, instance):
        self.engine = engine
        self.table = table
        self.instance = instance

    @abstractmethod
    def prepare(self):
        """Return list of (sql, params) statements for this operation."""
        pass

    @abstractmethod
    def execute(self):
        pass

    def _run(self, kind, call, sql, params):
        try:
            return call(sql, params)
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"{kind} {self.table.name} failed: {e}") from e


class InsertOperation(Operation):
    """Writes the record, then reads the row back into it by primary key."""

    def __init__(self, engine, table, instance):
        super().__init__(engine, table, instance)
        self.generated = [
            col for col in table.primary_columns() if getattr(instance, col.field_name) is None
        ]

    def _insert_columns(self):
        return [col for col in self.table.columns if col not in self.generated]

    def prepare(self):
        columns = self._insert_columns()
        builder = self.engine.query_builder
        insert_sql = builder.build_insert(self.table.name, [c.name for c in columns])
        return [(insert_sql, self.table.values_of(self.instance, columns))]

    def requery_statement(self):
        builder = self.engine.query_builder
        sql = builder.build_select(self.table.name, self.table.column_names(), self.table.primary_keys())
        return sql, self.table.values_of(self.instance, self.table.primary_columns())

    def insert(self):
        (insert_sql, values), = self.prepare()
        last_id = self._run("INSERT INTO", self.engine.execute_insert, insert_sql, values)

        if len(self.generated) == 1 and last_id is not None:
            setattr(self.instance, self.generated[0].field_name, last_id)

    def requery(self):
        if not self.table.primary_columns():
            logger.warning("requerying %s without primary key, first row wins", self.table.name)

        select_sql, keys = self.requery_statement()
        row = self._run("SELECT FROM", self.engine.fetch_one, select_sql, keys)
        if row is None:
            raise PersistenceError(f"SELECT FROM {self.table.name} failed: no row for primary key {keys}")

        for col, value in zip(self.table.columns, row):
            setattr(self.instance, col.field_name, value)
        return self.instance

    def execute(self):
        self.insert()
        return self.requery()


class DeleteOperation(Operation):
    def prepare(self):
        if not self.table.primary_columns():
            raise PersistenceError(f"DELETE FROM {self.table.name} refused: table has no primary key")
        builder = self.engine.query_builder
        sql = builder.build_delete(self.table.name, self.table.primary_keys())
        return [(sql, self.table.values_of(self.instance, self.table.primary_columns()))]

    def execute(self):
        for sql, values in self.prepare():
            self._run("DELETE FROM", self.engine.execute, sql, values)
