from enum import Enum, auto

class BlueprintState(Enum):
    RESOLVING = auto()
    ASSOCIATIONS_APPLIED = auto()
    FIELDS_APPLIED = auto()
    AFTER_BUILD_RUN = auto()
    BEFORE_CREATE_RUN = auto()
    PERSISTED = auto()
    REQUERIED = auto()
    AFTER_CREATE_RUN = auto()
    DONE = auto()
    FAILED = auto()
