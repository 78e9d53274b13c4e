class FactoryError(Exception):
    pass


class DefinitionError(FactoryError, ValueError):
    """Raised while a factory is being defined or a call is being configured."""


class CallbackError(FactoryError, RuntimeError):
    def __init__(self, phase, callback, cause):
        self.phase = phase
        self.callback = callback
        self.cause = cause
        name = getattr(callback, "__qualname__", repr(callback))
        super().__init__(f"{phase} callback {name} failed: {cause}")


class PersistenceError(FactoryError, RuntimeError):
    pass


class InstanceTypeError(PersistenceError, TypeError):
    pass


class TargetShapeError(FactoryError, TypeError):
    pass
