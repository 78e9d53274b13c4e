"""Declarative definition of factories.

    user_factory = new_factory(User, "users",
        field("name", "test name"),
        sequence_field("id", 1, lambda n: n),
        dynamic_field("email", lambda user: f"{user.name}@example.com"),
        trait("admin",
            field("role", "admin"),
        ),
        after_build(lambda user: ...),
    )

Every option validates its input against the model and raises
``DefinitionError`` when the definition is invalid.
"""
from minifactory.errors import DefinitionError
from minifactory.factory import AFTER_BUILD, AFTER_CREATE, BEFORE_CREATE, AssociationSpec, Factory


def new_factory(model, table=None, *options):
    if table is not None and not isinstance(table, str):
        raise DefinitionError(f"table name of {model.__name__} factory must be a string, got {table!r}")
    f = Factory(model, table)
    for option in options:
        option(f)
    return f


def field(name, value):
    def option(f):
        f.add_field_value(name, value)
    return option


def sequence_field(name, first, generate):
    """Unique values, e.g. e-mail addresses, generated from a counter starting at ``first``."""
    def option(f):
        f.add_sequence_field_value(name, first, generate)
    return option


def dynamic_field(name, generate):
    def option(f):
        f.add_dynamic_field_value(name, generate)
    return option


def association(name, reference_field, association_reference_field, original_factory, *options):
    def option(f):
        if not f.can_have_associations:
            raise DefinitionError(f"association {name} error: nested associations isn't allowed")

        overrides = original_factory.new_association_factory()
        for opt in options:
            opt(overrides)

        spec = AssociationSpec(name, reference_field, association_reference_field, original_factory, overrides)
        f.add_association_field_value(spec)
    return option


def trait(trait_name, *options):
    """Group field values and callbacks under a name selectable at build time."""
    def option(f):
        if not f.can_have_traits:
            raise DefinitionError(f"Trait {trait_name} error: nested traits is not allowed")

        trait_factory = f.new_trait_factory()
        for opt in options:
            opt(trait_factory)
        f.add_trait(trait_name, trait_factory)
    return option


def _callback(phase, callback):
    def option(f):
        f.add_callback(phase, callback)
    return option


def after_build(callback):
    """Runs after all field values are set, for both build and create."""
    return _callback(AFTER_BUILD, callback)


def before_create(callback):
    return _callback(BEFORE_CREATE, callback)


def after_create(callback):
    return _callback(AFTER_CREATE, callback)
