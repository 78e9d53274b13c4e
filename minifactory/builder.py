import re

from minifactory.errors import PersistenceError

QMARK = "qmark"
DOLLAR = "dollar"
PARAMSTYLES = (QMARK, DOLLAR)


class QueryBuilder:
    def __init__(self, paramstyle=QMARK):
        if paramstyle not in PARAMSTYLES:
            raise ValueError(f"Unknown paramstyle: {paramstyle}")
        self.paramstyle = paramstyle
        self._safe_ident_pattern = re.compile(r'^[a-zA-Z_][a-zA-Z0-9_]*(\.[a-zA-Z_][a-zA-Z0-9_]*)?$')

    def _ident(self, identifier):
        if not identifier or not self._safe_ident_pattern.match(str(identifier)):
            raise PersistenceError(f"Unsafe SQL identifier: {identifier}")
        return identifier

    def param(self, position):
        """Placeholder for the 1-based ``position`` in a statement."""
        if self.paramstyle == DOLLAR:
            return f"${position}"
        return "?"

    def where_clause(self, fields, start=1):
        parts = []
        for i, field in enumerate(fields):
            parts.append(f"{self._ident(field)}={self.param(start + i)}")
        if not parts:
            return ""
        return "WHERE " + " AND ".join(parts)

    def build_insert(self, table_name, fields):
        table = self._ident(table_name)
        if not fields:
            return f"INSERT INTO {table} DEFAULT VALUES"
        columns = ", ".join(self._ident(f) for f in fields)
        placeholders = ", ".join(self.param(i + 1) for i in range(len(fields)))
        return f"INSERT INTO {table} ({columns}) VALUES ({placeholders})"

    def build_select(self, table_name, fields, primary_keys):
        table = self._ident(table_name)
        columns = ", ".join(self._ident(f) for f in fields)
        sql = f"SELECT {columns} FROM {table}"
        where = self.where_clause(primary_keys)
        if where:
            sql += " " + where
        return sql

    def build_delete(self, table_name, primary_keys):
        table = self._ident(table_name)
        sql = f"DELETE FROM {table}"
        where = self.where_clause(primary_keys)
        if where:
            sql += " " + where
        return sql
