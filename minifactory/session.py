import logging
from typing import get_args, get_origin

from minifactory.blueprint import Blueprint
from minifactory.database import DatabaseEngine
from minifactory.errors import DefinitionError, TargetShapeError
from minifactory.fields import type_name

logger = logging.getLogger(__name__)


def with_traits(*traits):
    """Select traits for one call. Later traits override earlier ones."""
    def option(bp):
        for name in traits:
            bp.factory.trait(name)
            bp.traits.append(name)
    return option


def with_field(name, value):
    """Set one field for one call, overriding factory and trait values."""
    def option(bp):
        bp.factory.shape.check_value(name, value)
        bp.field_values[name] = value
    return option


def new_blueprint(factory, options):
    bp = Blueprint(factory)
    for option in options:
        option(bp)
    return bp


def check_target(factory, into):
    if into is None:
        return
    if into is not factory.model:
        raise TargetShapeError(
            f"cannot use target (type {type_name(into)}) as type {factory.model.__name__}"
        )


def check_list_target(factory, into):
    if into is None:
        return
    if get_origin(into) is list:
        args = get_args(into)
        elem = args[0] if args else None
        if elem is not factory.model:
            raise TargetShapeError(
                f"cannot use target (type {type_name(into)}) as type list[{factory.model.__name__}]"
            )
        return
    check_target(factory, into)


def _check_count(count):
    if count < 0:
        raise DefinitionError(f"count must not be negative, got {count}")


def build(factory, *options, into=None):
    """Build a record in memory.

    ``into`` optionally names the expected record type; a mismatch raises
    ``TargetShapeError`` before anything is built.
    """
    check_target(factory, into)
    return new_blueprint(factory, options).build()


def build_list(factory, count, *options, into=None):
    check_list_target(factory, into)
    _check_count(count)
    return [new_blueprint(factory, options).build() for _ in range(count)]


class Session:
    """Creates and deletes factory records through one database engine."""

    def __init__(self, engine=None, **config):
        self._owns_engine = engine is None
        self.engine = engine if engine is not None else DatabaseEngine(**config)

    def __repr__(self):
        return f"<Session {self.engine!r}>"

    def build(self, factory, *options, into=None):
        return build(factory, *options, into=into)

    def build_list(self, factory, count, *options, into=None):
        return build_list(factory, count, *options, into=into)

    def create(self, factory, *options, into=None):
        check_target(factory, into)
        bp = new_blueprint(factory, options)
        return bp.create(self.engine)

    def create_list(self, factory, count, *options, into=None):
        check_list_target(factory, into)
        _check_count(count)
        return [new_blueprint(factory, options).create(self.engine) for _ in range(count)]

    def delete(self, factory, instance):
        Blueprint(factory).delete(self.engine, instance)

    def close(self):
        if self._owns_engine:
            self.engine.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type:
                self.engine.rollback()
            else:
                self.engine.commit()
        finally:
            self.close()
