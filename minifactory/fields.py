import dataclasses
import functools
import threading
import types
import typing
from typing import Annotated, Any, Literal, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel

from minifactory.errors import DefinitionError
from minifactory.orm_types import Column

NoneType = type(None)
ZERO_VALUES = {int: 0, float: 0.0, str: "", bool: False, bytes: b""}
EMPTY_CONTAINERS = (list, dict, set, frozenset, tuple)
PATH_SEPARATOR = "."


def is_record_type(tp):
    if not isinstance(tp, type) or get_origin(tp) is not None:
        return False
    return dataclasses.is_dataclass(tp) or issubclass(tp, BaseModel)


def split_path(path):
    return path.split(PATH_SEPARATOR)


def type_name(tp):
    origin = get_origin(tp)
    if origin is not None and get_args(tp):
        return f"{type_name(origin)}[{', '.join(type_name(arg) for arg in get_args(tp))}]"
    if isinstance(tp, type):
        return tp.__name__
    return str(tp).replace("typing.", "")


def _strip_annotated(annotation):
    if get_origin(annotation) is Annotated:
        args = get_args(annotation)
        return args[0], list(args[1:])
    return annotation, []


def _is_union(origin):
    return origin is Union or origin is types.UnionType


def zero_value(annotation):
    annotation, _ = _strip_annotated(annotation)
    origin = get_origin(annotation)

    if _is_union(origin):
        args = get_args(annotation)
        if NoneType in args:
            return None
        return zero_value(args[0])
    if origin is Literal:
        return get_args(annotation)[0]
    if origin is not None:
        annotation = origin

    if annotation in ZERO_VALUES:
        return ZERO_VALUES[annotation]
    if annotation in EMPTY_CONTAINERS:
        return annotation()
    if is_record_type(annotation):
        return RecordShape.of(annotation).new_instance()
    return None


def accepts(annotation, value):
    """Loose runtime check of ``value`` against a field annotation."""
    annotation, _ = _strip_annotated(annotation)
    if annotation is Any or isinstance(annotation, (typing.TypeVar, typing.ForwardRef, str)):
        return True
    if annotation is None or annotation is NoneType:
        return value is None

    origin = get_origin(annotation)
    if _is_union(origin):
        return any(accepts(arg, value) for arg in get_args(annotation))
    if origin is Literal:
        return value in get_args(annotation)
    if origin is not None:
        annotation = origin

    if not isinstance(annotation, type):
        return True
    if annotation is float:
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if annotation is int:
        return isinstance(value, int) and not isinstance(value, bool)
    return isinstance(value, annotation)


class RecordField:
    def __init__(self, name, index, annotation, column=None, default=dataclasses.MISSING,
                 default_factory=dataclasses.MISSING):
        self.name = name
        self.index = index
        self.annotation = annotation
        self.column = column
        self.default = default
        self.default_factory = default_factory
        self.record_type = None
        self.nilable = False

        origin = get_origin(annotation)
        if _is_union(origin):
            args = get_args(annotation)
            members = [arg for arg in args if arg is not NoneType]
            if NoneType in args and len(members) == 1 and is_record_type(members[0]):
                self.record_type = members[0]
                self.nilable = True
        elif is_record_type(annotation):
            self.record_type = annotation

    def __repr__(self):
        return f"<RecordField {self.index}:{self.name} {type_name(self.annotation)}>"

    def initial_value(self):
        if self.default_factory is not dataclasses.MISSING:
            return self.default_factory()
        if self.default is not dataclasses.MISSING:
            return self.default
        return zero_value(self.annotation)


class FieldPath:
    """Getter and setter for one dotted field path of a record type."""

    def __init__(self, path, steps):
        self.path = path
        self.steps = steps

    def __repr__(self):
        return f"<FieldPath {self.path}>"

    @property
    def field(self):
        return self.steps[-1]

    def get(self, instance):
        target = instance
        for step in self.steps:
            if target is None:
                return None
            target = getattr(target, step.name)
        return target

    def set(self, instance, value):
        target = instance
        for step in self.steps[:-1]:
            current = getattr(target, step.name)
            if current is None:
                current = RecordShape.of(step.record_type).new_instance()
                setattr(target, step.name, current)
            target = current
        setattr(target, self.steps[-1].name, value)


class RecordShape:
    """Field table of a dataclass or pydantic record type, built once per type."""

    _registry = {}
    _lock = threading.Lock()

    @classmethod
    def of(cls, model):
        with cls._lock:
            shape = cls._registry.get(model)
        if shape is None:
            shape = cls(model)
            with cls._lock:
                shape = cls._registry.setdefault(model, shape)
        return shape

    def __init__(self, model):
        if not is_record_type(model):
            raise DefinitionError(f"{model!r} is not a dataclass or pydantic model")

        self.model = model
        self.name = model.__name__
        self.is_pydantic = issubclass(model, BaseModel)
        self.fields = {}
        self._paths = {}
        self._paths_lock = threading.Lock()

        if self.is_pydantic:
            self._resolve_pydantic_fields()
        else:
            self._resolve_dataclass_fields()

    def __repr__(self):
        return f"<RecordShape {self.name} fields=[{', '.join(self.fields)}]>"

    def _resolve_dataclass_fields(self):
        try:
            hints = get_type_hints(self.model, include_extras=True)
        except (NameError, TypeError):
            hints = {}

        for index, f in enumerate(dataclasses.fields(self.model)):
            annotation, metadata = _strip_annotated(hints.get(f.name, f.type))
            self.fields[f.name] = RecordField(
                f.name, index, annotation,
                column=_find_column(metadata),
                default=f.default,
                default_factory=f.default_factory,
            )

    def _resolve_pydantic_fields(self):
        for index, (name, info) in enumerate(self.model.model_fields.items()):
            annotation, metadata = _strip_annotated(info.annotation)
            default_factory = dataclasses.MISSING
            if not info.is_required():
                # pydantic hands out a copy of the default on every call
                default_factory = functools.partial(info.get_default, call_default_factory=True)
            self.fields[name] = RecordField(
                name, index, annotation,
                column=_find_column(list(info.metadata) + metadata),
                default_factory=default_factory,
            )

    def field(self, name):
        return self.fields.get(name)

    def has_path(self, path):
        try:
            self.path(path)
        except DefinitionError:
            return False
        return True

    def path(self, path):
        with self._paths_lock:
            resolved = self._paths.get(path)
        if resolved is not None:
            return resolved

        steps = []
        shape = self
        names = split_path(path)
        for i, name in enumerate(names):
            f = shape.field(name) if shape is not None else None
            if f is None:
                raise DefinitionError(f"invalid field name {path} to define factory of {self.name}")
            steps.append(f)
            if i == len(names) - 1:
                break
            if f.record_type is None:
                raise DefinitionError(
                    f"field {name} of {path} is not a record or optional record in {self.name}"
                )
            shape = RecordShape.of(f.record_type)

        resolved = FieldPath(path, steps)
        with self._paths_lock:
            self._paths[path] = resolved
        return resolved

    def check_value(self, path, value):
        f = self.path(path).field
        if not accepts(f.annotation, value):
            raise DefinitionError(
                f"cannot use value (type {type_name(type(value))}) as type {type_name(f.annotation)} "
                f"of field {path} to define factory of {self.name}"
            )

    def new_instance(self):
        values = {name: f.initial_value() for name, f in self.fields.items()}
        if self.is_pydantic:
            return self.model.model_construct(**values)
        instance = self.model.__new__(self.model)
        for name, value in values.items():
            object.__setattr__(instance, name, value)
        return instance


def _find_column(metadata):
    for item in metadata:
        if isinstance(item, Column):
            return item
    return None
