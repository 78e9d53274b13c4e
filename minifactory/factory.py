from minifactory.errors import DefinitionError
from minifactory.fields import RecordShape
from minifactory.mapper import Table
from minifactory.values import AssociationValue, DynamicValue, SequenceValue, StaticValue

AFTER_BUILD = "after_build"
BEFORE_CREATE = "before_create"
AFTER_CREATE = "after_create"
CALLBACK_PHASES = (AFTER_BUILD, BEFORE_CREATE, AFTER_CREATE)


class AssociationSpec:
    """A nested record built from ``factory`` and stored at ``field_path``.

    After the nested record exists, the value of its
    ``association_reference_field`` is copied into the owner's
    ``reference_field``. ``overrides`` is the restricted sub-factory holding
    per-association field values.
    """

    def __init__(self, field_path, reference_field, association_reference_field, factory, overrides):
        self.field_path = field_path
        self.reference_field = reference_field
        self.association_reference_field = association_reference_field
        self.factory = factory
        self.overrides = overrides

    def __repr__(self):
        return (
            f"<AssociationSpec {self.field_path} -> {self.factory.model.__name__} "
            f"({self.reference_field} = {self.association_reference_field})>"
        )

    def field_values(self):
        values = {}
        values.update(self.overrides.field_values)
        values.update(self.overrides.sequence_field_values)
        values.update(self.overrides.dynamic_field_values)
        return values


class Factory:
    def __init__(self, model, table=None, can_have_associations=True, can_have_traits=True,
                 can_have_callbacks=True):
        self.model = model
        self.shape = RecordShape.of(model)
        self.table = table

        self.field_values = {}
        self.sequence_field_values = {}
        self.dynamic_field_values = {}
        self.association_field_values = {}
        self.traits = {}
        self.callbacks = {phase: [] for phase in CALLBACK_PHASES}

        self.can_have_associations = can_have_associations
        self.can_have_traits = can_have_traits
        self.can_have_callbacks = can_have_callbacks

        self._table_mapping = None

    def __repr__(self):
        traits = ", ".join(self.traits) or "None"
        return f"<Factory model={self.model.__name__} table={self.table} traits=[{traits}]>"

    @property
    def after_build_callbacks(self):
        return self.callbacks[AFTER_BUILD]

    @property
    def before_create_callbacks(self):
        return self.callbacks[BEFORE_CREATE]

    @property
    def after_create_callbacks(self):
        return self.callbacks[AFTER_CREATE]

    @property
    def table_mapping(self):
        if self._table_mapping is None:
            self._table_mapping = Table.from_factory(self)
        return self._table_mapping

    def new_trait_factory(self):
        return Factory(self.model, can_have_associations=True, can_have_traits=False, can_have_callbacks=True)

    def new_association_factory(self):
        return Factory(self.model, can_have_associations=False, can_have_traits=False, can_have_callbacks=False)

    def defines(self, path):
        return (
            path in self.field_values
            or path in self.sequence_field_values
            or path in self.dynamic_field_values
            or path in self.association_field_values
        )

    def _check_new_path(self, path):
        self.shape.path(path)
        if self.defines(path):
            raise DefinitionError(f"duplicate definition of field {path}")

    def add_field_value(self, path, value):
        self.shape.check_value(path, value)
        self._check_new_path(path)
        self.field_values[path] = StaticValue(value)

    def add_sequence_field_value(self, path, first, generate):
        self._check_new_path(path)
        self.sequence_field_values[path] = SequenceValue(first, generate)

    def add_dynamic_field_value(self, path, generate):
        self._check_new_path(path)
        self.dynamic_field_values[path] = DynamicValue(generate)

    def add_association_field_value(self, spec):
        path = spec.field_path
        self.shape.path(path)
        if not self.can_have_associations:
            raise DefinitionError(f"association {path} error: nested associations isn't allowed")

        target = self.shape.path(path).field
        if target.record_type is not spec.factory.model:
            raise DefinitionError(
                f"association {path} error: field holds {target.record_type and target.record_type.__name__}, "
                f"factory builds {spec.factory.model.__name__}"
            )
        self.shape.path(spec.reference_field)
        spec.factory.shape.path(spec.association_reference_field)

        self._check_new_path(path)
        self.association_field_values[path] = AssociationValue(spec)

    def add_trait(self, name, trait_factory):
        if not self.can_have_traits:
            raise DefinitionError(f"Trait {name} error: nested traits is not allowed")
        if name in self.traits:
            raise DefinitionError(f"duplicate definition of trait {name}")
        self.traits[name] = trait_factory

    def add_callback(self, phase, callback):
        if phase not in self.callbacks:
            raise DefinitionError(f"unknown callback phase {phase}")
        if not self.can_have_callbacks:
            raise DefinitionError(f"{phase} is not allowed in associations")
        self.callbacks[phase].append(callback)

    def trait(self, name):
        trait_factory = self.traits.get(name)
        if trait_factory is None:
            raise DefinitionError(f"undefined trait name {name} of type {self.model.__name__} factory")
        return trait_factory

    def sequences(self):
        for value in self.sequence_field_values.values():
            yield value.sequence
        for trait_factory in self.traits.values():
            yield from trait_factory.sequences()
        for value in self.association_field_values.values():
            yield from value.spec.overrides.sequences()

    def rewind_sequences(self):
        for seq in self.sequences():
            seq.rewind()
