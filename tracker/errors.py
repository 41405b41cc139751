from tracker.constants import PAST_DAY_MESSAGE, READ_ONLY_MESSAGE


class TrackerError(Exception):
    """Base class for errors raised by the tracker core."""


class ValidationRejected(TrackerError, ValueError):
    """A mutation was refused; state is unchanged and the message is user-facing."""


class ReadOnlyError(ValidationRejected):
    def __init__(self, message=READ_ONLY_MESSAGE):
        super().__init__(message)


class PastDayLockedError(ValidationRejected):
    def __init__(self, day_key, message=PAST_DAY_MESSAGE):
        super().__init__(message)
        self.day_key = day_key


class InvalidActivityError(ValidationRejected):
    pass


class ManualTotalsLockedError(ValidationRejected):
    pass


class ImportFailedError(TrackerError):
    pass
