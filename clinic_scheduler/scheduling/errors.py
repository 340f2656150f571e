"""Exceptions raised by the scheduling engine and booking path."""


class SchedulingError(Exception):
    """Base class for scheduling failures."""


class NotFoundError(SchedulingError):
    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f'{kind} not found: {identifier}')


class TimeFormatError(SchedulingError, ValueError):
    """A time or date string did not match the expected format."""


class ConflictError(SchedulingError):
    def __init__(self, provider_id: str, conflicting_ids: list[str]):
        self.provider_id = provider_id
        self.conflicting_ids = conflicting_ids
        super().__init__(
            f'Provider {provider_id} is already booked at this time '
            f'(conflicts with {", ".join(conflicting_ids)}).'
        )


class BookingValidationError(SchedulingError):
    """The requested booking is not allowed for the provider or time."""


class InvalidTransitionError(SchedulingError):
    """The appointment cannot move to the requested state."""
