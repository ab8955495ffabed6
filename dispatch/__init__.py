#Expose the high-level pipeline pieces:
#Error taxonomy
#Reference resolution (legacy ids, phones, names)
#Puller directory (registration, location reports, nearby lookup)
#Dispatcher orchestrator (the "one call" entry point for every ride operation)

from .exceptions import (
    InvalidTransition,
    InvalidValue,
    MissingField,
    NotFound,
    RideAlreadyTaken,
    RideError,
    Unauthorized,
)
from .resolver import ReferenceResolver
from .directory import PullerDirectory, PullerProfile
from .locks import RideLockManager
from .state_machines.ride_state import RideEvent
from .dispatcher import RideDispatcher

__all__ = [
    "InvalidTransition",
    "InvalidValue",
    "MissingField",
    "NotFound",
    "RideAlreadyTaken",
    "RideError",
    "Unauthorized",
    "ReferenceResolver",
    "PullerDirectory",
    "PullerProfile",
    "RideLockManager",
    "RideEvent",
    "RideDispatcher",
]
