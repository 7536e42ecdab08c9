"""Exceptions raised while processing interaction events."""


class BehaviourError(Exception):
    """Error while processing an event for an attempt."""

    pass


class AttemptNotFoundError(BehaviourError):
    """The attempt an event was addressed to does not exist."""

    pass


class ManualGradingError(BehaviourError):
    """A manual comment or mark could not be applied."""

    pass


class MarkOutOfRangeError(ManualGradingError):
    """A manual mark falls outside the attempt's fraction bounds."""

    pass


class ScoreOutOfRangeError(BehaviourError):
    """A grader reported a score outside the attempt's mark range."""

    pass
