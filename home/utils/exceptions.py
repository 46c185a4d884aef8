"""Exceptions raised by the ticket workflow and its storage collaborators."""


class HomeError(Exception):
    """Base class for every error the service raises on purpose."""


class LifecycleError(HomeError):
    """A command was rejected against the current snapshot."""


class ValidationError(LifecycleError):
    """Input failed validation (missing fields, bad date, rating out of range)."""


class NotFoundError(LifecycleError):
    def __init__(self, kind: str, entity_id: str):
        super().__init__(f"{kind} not found: {entity_id}")
        self.kind = kind
        self.entity_id = entity_id


class InvalidTransitionError(LifecycleError):
    """The entity's current state does not allow the requested transition."""


class AlreadyAssignedError(InvalidTransitionError):
    pass


class AlreadyRatedError(InvalidTransitionError):
    pass


class PermissionDeniedError(LifecycleError):
    pass


class StaleStateError(HomeError):
    """
    A commit lost a compare-and-swap: the entity changed since the snapshot
    the command was applied to. Nothing from the change set was written.
    """


class StorageUnavailableError(HomeError):
    pass
