import logging

from minifactory.callbacks import run_phase
from minifactory.errors import InstanceTypeError
from minifactory.factory import AFTER_BUILD, AFTER_CREATE, BEFORE_CREATE
from minifactory.persistence import DeleteOperation, InsertOperation
from minifactory.states import BlueprintState
from minifactory.values import resolve_field_values

logger = logging.getLogger(__name__)


class Blueprint:
    """Working state of one build, create or delete call.

    A blueprint is single-use. Sequences and every other piece of durable
    state live on the factory.
    """

    def __init__(self, factory, traits=(), field_values=None, table=None):
        self.factory = factory
        self.traits = list(traits)
        self.field_values = dict(field_values or {})
        self.table = table
        self.state = None

    def __repr__(self):
        traits = ", ".join(self.traits) or "None"
        state = self.state.name if self.state else "NEW"
        return f"<Blueprint model={self.factory.model.__name__} traits=[{traits}] state={state}>"

    @classmethod
    def for_association(cls, spec, persist=False):
        table = spec.factory.table_mapping if persist else None
        return cls(spec.factory, field_values=spec.field_values(), table=table)

    def _enter(self, state):
        self.state = state
        logger.debug("%s %s", self.factory.model.__name__, state.name)

    def build(self):
        try:
            instance, values = self._prepare()
            self._apply_associations(instance, values.associations(), persist=False, engine=None)
            self._apply_field_values(instance, values)
            self._after_build(instance)
        except Exception:
            self.state = BlueprintState.FAILED
            raise
        self._enter(BlueprintState.DONE)
        return instance

    def create(self, engine):
        table = self._table()
        try:
            instance, values = self._prepare()
            self._apply_associations(instance, values.associations(), persist=True, engine=engine)
            self._apply_field_values(instance, values)
            self._after_build(instance)

            run_phase(self.factory, self.traits, BEFORE_CREATE, instance)
            self._enter(BlueprintState.BEFORE_CREATE_RUN)

            operation = InsertOperation(engine, table, instance)
            operation.insert()
            self._enter(BlueprintState.PERSISTED)
            operation.requery()
            self._enter(BlueprintState.REQUERIED)

            run_phase(self.factory, self.traits, AFTER_CREATE, instance)
            self._enter(BlueprintState.AFTER_CREATE_RUN)
        except Exception:
            self.state = BlueprintState.FAILED
            raise
        self._enter(BlueprintState.DONE)
        return instance

    def delete(self, engine, instance):
        model = self.factory.model
        if type(instance) is not model:
            raise InstanceTypeError(
                f"can't delete type({type(instance).__name__}) instance, want type({model.__name__}) instance"
            )
        DeleteOperation(engine, self._table(), instance).execute()
        self._enter(BlueprintState.DONE)

    def _table(self):
        if self.table is None:
            self.table = self.factory.table_mapping
        return self.table

    def _prepare(self):
        self._enter(BlueprintState.RESOLVING)
        values = resolve_field_values(self.factory, self.traits, self.field_values)
        return self.factory.shape.new_instance(), values

    def _set(self, instance, path, value):
        self.factory.shape.path(path).set(instance, value)

    def _apply_associations(self, instance, associations, persist, engine):
        for path, association in associations.items():
            spec = association.spec
            sub_blueprint = Blueprint.for_association(spec, persist=persist)
            if persist:
                nested = sub_blueprint.create(engine)
            else:
                nested = sub_blueprint.build()

            self._set(instance, path, nested)
            reference = spec.factory.shape.path(spec.association_reference_field).get(nested)
            self._set(instance, spec.reference_field, reference)
        self._enter(BlueprintState.ASSOCIATIONS_APPLIED)

    def _apply_field_values(self, instance, values):
        for path, value in values.statics().items():
            self._set(instance, path, value.value)

        for path, value in values.sequences().items():
            self._set(instance, path, value.value())

        for path, value in values.dynamics().items():
            self._set(instance, path, value.value(instance))
        self._enter(BlueprintState.FIELDS_APPLIED)

    def _after_build(self, instance):
        run_phase(self.factory, self.traits, AFTER_BUILD, instance)
        self._enter(BlueprintState.AFTER_BUILD_RUN)
