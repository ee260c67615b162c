"""Error taxonomy for the schedule-building services.

Every service raises a subclass of :class:`SchedulingError`.  Each class
carries a stable ``code`` that the JSON views echo back to clients so they
can branch on the failure kind without parsing messages.

``RequiresConfirmation`` is deliberately absent: a truncated placement is an
expected outcome returned by the assignment service, not an error.
"""


class SchedulingError(Exception):
    """Base class for all schedule-building errors."""

    code = "scheduling_error"


class InvalidRangeError(SchedulingError):
    """An end date precedes its start date, or a date lies outside a range."""

    code = "invalid_range"


class InvalidDurationError(SchedulingError):
    """A requested or confirmed duration is not a positive whole number of minutes."""

    code = "invalid_duration"


class NotFoundError(SchedulingError):
    """A referenced conference, section, presentation, or time slot does not exist."""

    code = "not_found"


class NoCapacityError(SchedulingError):
    """The section has no room left for the requested placement."""

    code = "no_capacity"


class FixedSectionError(SchedulingError):
    """The section holds a fixed calendar item (keynote, break, meal) and takes no presentations."""

    code = "fixed_section"


class ConflictError(SchedulingError):
    """A concurrent write collided with a store-level uniqueness constraint.

    Conflicts are retryable: re-reading the section and trying again may
    succeed.  The core never retries on its own.
    """

    code = "conflict"
    retryable = True


class AlreadyScheduledError(ConflictError):
    """The presentation already occupies a time slot."""

    code = "already_scheduled"
    retryable = False


class InvalidScheduleDataError(SchedulingError):
    """Stored slots are malformed or exceed the configured scan limit."""

    code = "invalid_schedule_data"
