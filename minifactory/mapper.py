import logging
import re

logger = logging.getLogger(__name__)

_FIRST_CAP = re.compile(r"(.)([A-Z][a-z]+)")
_ALL_CAP = re.compile(r"([a-z0-9])([A-Z])")


def snake_case(name):
    name = _FIRST_CAP.sub(r"\1_\2", name)
    return _ALL_CAP.sub(r"\1_\2", name).lower()


class ColumnMapping:
    def __init__(self, field_index, field_name, name, primary=False):
        self.field_index = field_index
        self.field_name = field_name
        self.name = name
        self.primary = primary

    def __repr__(self):
        pk = " pk" if self.primary else ""
        return f"<ColumnMapping {self.field_index}:{self.field_name} -> {self.name}{pk}>"

    def __eq__(self, other):
        if not isinstance(other, ColumnMapping):
            return NotImplemented
        return (
            self.field_index == other.field_index
            and self.field_name == other.field_name
            and self.name == other.name
            and self.primary == other.primary
        )


class Table:
    """Database table a factory's records are written to.

    Columns come from the ``Column`` annotations of the model's top-level
    fields, in field order.
    """

    def __init__(self, name, columns):
        self.name = name
        self.columns = list(columns)

    def __repr__(self):
        cols = ", ".join(c.name for c in self.columns)
        pks = ", ".join(self.primary_keys()) or "None"
        return f"<Table {self.name} columns=[{cols}] pk=[{pks}]>"

    @classmethod
    def from_factory(cls, factory):
        shape = factory.shape
        columns = []
        for f in shape.fields.values():
            if f.column is None:
                continue
            columns.append(ColumnMapping(
                field_index=f.index,
                field_name=f.name,
                name=f.column.name or snake_case(f.name),
                primary=f.column.pk,
            ))

        table = cls(resolve_table_name(factory), columns)
        if not table.primary_columns():
            logger.warning("%s has no primary key column, rows can't be requeried safely", table.name)
        return table

    def primary_columns(self):
        return [c for c in self.columns if c.primary]

    def primary_keys(self):
        return [c.name for c in self.primary_columns()]

    def column_names(self):
        return [c.name for c in self.columns]

    def values_of(self, instance, columns=None):
        return [getattr(instance, c.field_name) for c in (columns if columns is not None else self.columns)]


def resolve_table_name(factory):
    if factory.table:
        return factory.table
    meta_cls = getattr(factory.model, "Meta", None)
    table_name = getattr(meta_cls, "table_name", None)
    if table_name:
        return table_name
    return snake_case(factory.model.__name__) + "s"
