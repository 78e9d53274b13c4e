class Column:
    """Marks a record field as a persisted column.

    Used as ``Annotated`` metadata on a dataclass or pydantic field::

        id: Annotated[Optional[int], Column(pk=True)] = None
        nick_name: Annotated[str, Column("nick")] = ""

    A column without a name is stored under the snake_case of the field name.
    """

    def __init__(self, name=None, pk=False):
        if name is not None:
            name = name.strip()
        self.name = name or None
        self.pk = pk

    def __repr__(self):
        parts = [self.name or "<field name>"]
        if self.pk:
            parts.append("pk")
        return f"<Column {', '.join(parts)}>"

    def __eq__(self, other):
        if not isinstance(other, Column):
            return NotImplemented
        return self.name == other.name and self.pk == other.pk

    def __hash__(self):
        return hash((self.name, self.pk))
