# minifactory - test records from declarative factories
from minifactory.orm_types import Column
from minifactory.factory import Factory, AssociationSpec
from minifactory.define import (
    new_factory, field, sequence_field, dynamic_field, association, trait,
    after_build, before_create, after_create,
)
from minifactory.session import Session, build, build_list, with_traits, with_field
from minifactory.database import DatabaseEngine, EngineConfig
from minifactory.errors import (
    FactoryError, DefinitionError, CallbackError, PersistenceError, InstanceTypeError, TargetShapeError,
)

__version__ = "0.1.0"
__all__ = [
    "Column", "Factory", "AssociationSpec",
    "new_factory", "field", "sequence_field", "dynamic_field", "association", "trait",
    "after_build", "before_create", "after_create",
    "Session", "build", "build_list", "with_traits", "with_field",
    "DatabaseEngine", "EngineConfig",
    "FactoryError", "DefinitionError", "CallbackError", "PersistenceError", "InstanceTypeError",
    "TargetShapeError",
]
