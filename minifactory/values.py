from minifactory.sequence import Sequence


class FieldValue:
    """Base of the four value-provider kinds a factory field can carry."""

    kind = None


class StaticValue(FieldValue):
    kind = "static"

    def __init__(self, value):
        self.value = value

    def __repr__(self):
        return f"<StaticValue {self.value!r}>"


class SequenceValue(FieldValue):
    kind = "sequence"

    def __init__(self, first, generate):
        self.sequence = Sequence(first)
        self.generate = generate

    def __repr__(self):
        return f"<SequenceValue {self.sequence!r}>"

    def value(self):
        return self.generate(self.sequence.next())


class DynamicValue(FieldValue):
    kind = "dynamic"

    def __init__(self, generate):
        self.generate = generate

    def __repr__(self):
        name = getattr(self.generate, "__qualname__", repr(self.generate))
        return f"<DynamicValue {name}>"

    def value(self, instance):
        return self.generate(instance)


class AssociationValue(FieldValue):
    kind = "association"

    def __init__(self, spec):
        self.spec = spec

    def __repr__(self):
        return f"<AssociationValue {self.spec!r}>"


KINDS = (StaticValue, SequenceValue, DynamicValue, AssociationValue)


class ResolvedFieldValues(dict):
    """Effective field path -> FieldValue map of one blueprint."""

    def __init__(self):
        super().__init__()
        self._partitions = None

    def __setitem__(self, path, value):
        self._partitions = None
        super().__setitem__(path, value)

    def _partition(self):
        if self._partitions is None:
            partitions = {kind: {} for kind in KINDS}
            for path, value in self.items():
                if isinstance(value, StaticValue):
                    partitions[StaticValue][path] = value
                elif isinstance(value, SequenceValue):
                    partitions[SequenceValue][path] = value
                elif isinstance(value, DynamicValue):
                    partitions[DynamicValue][path] = value
                elif isinstance(value, AssociationValue):
                    partitions[AssociationValue][path] = value
                else:
                    raise TypeError(f"unknown field value kind {type(value).__name__} for field {path}")
            self._partitions = partitions
        return self._partitions

    def statics(self):
        return self._partition()[StaticValue]

    def sequences(self):
        return self._partition()[SequenceValue]

    def dynamics(self):
        return self._partition()[DynamicValue]

    def associations(self):
        return self._partition()[AssociationValue]


def as_field_value(value):
    if isinstance(value, FieldValue):
        return value
    return StaticValue(value)


def _apply_factory_values(factory, resolved):
    for group in (
        factory.field_values,
        factory.sequence_field_values,
        factory.dynamic_field_values,
        factory.association_field_values,
    ):
        for path, value in group.items():
            resolved[path] = value


def resolve_field_values(factory, traits=(), overrides=None):
    """Merge factory values, selected traits and per-call overrides, later wins.

    Traits are overlaid in selection order. Overrides replace whatever
    provider a path had, whatever its kind.
    """
    resolved = ResolvedFieldValues()
    _apply_factory_values(factory, resolved)

    for name in traits:
        _apply_factory_values(factory.traits[name], resolved)

    for path, value in (overrides or {}).items():
        resolved[path] = as_field_value(value)

    return resolved
