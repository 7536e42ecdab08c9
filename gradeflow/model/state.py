from __future__ import annotations

import decimal
import enum

# fractions within this distance of 0 or 1 count as wrong or right
FractionTolerance = decimal.Decimal("0.000001")


class InteractionState(enum.Enum):
    NotStarted = "notstarted"
    Todo = "todo"
    Invalid = "invalid"
    Complete = "complete"
    NeedsGrading = "needsgrading"
    Finished = "finished"
    GaveUp = "gaveup"
    GradedWrong = "gradedwrong"
    GradedPartial = "gradedpartial"
    GradedRight = "gradedright"
    ManFinished = "manfinished"
    ManGaveUp = "mangaveup"
    ManGradedWrong = "mangrwrong"
    ManGradedPartial = "mangrpartial"
    ManGradedRight = "mangrright"

    @property
    def is_active(self) -> bool:
        return self in _ActiveStates

    @property
    def is_finished(self) -> bool:
        return not self.is_active

    @property
    def is_graded(self) -> bool:
        return self in _GradedStates or self in _ManuallyGradedStates

    @property
    def is_commented(self) -> bool:
        return self in _CommentedStates

    @classmethod
    def graded_state_for_fraction(cls, fraction: decimal.Decimal) -> InteractionState:
        if fraction < FractionTolerance:
            return cls.GradedWrong
        elif fraction > 1 - FractionTolerance:
            return cls.GradedRight
        return cls.GradedPartial

    @classmethod
    def manually_graded_state_for_fraction(cls, fraction: decimal.Decimal | None) -> InteractionState:
        if fraction is None:
            return cls.NeedsGrading
        elif fraction < FractionTolerance:
            return cls.ManGradedWrong
        elif fraction > 1 - FractionTolerance:
            return cls.ManGradedRight
        return cls.ManGradedPartial

    def corresponding_commented_state(self, fraction: decimal.Decimal | None) -> InteractionState:
        """The state an attempt moves to when a marker comments on it in this state.

        Raises ValueError for active states, which cannot be commented on.
        """
        if self.is_active:
            raise ValueError(f"cannot comment on an attempt in state {self.value}")
        if fraction is None:
            if self in (InteractionState.GaveUp, InteractionState.ManGaveUp):
                return InteractionState.ManGaveUp
            if self in (InteractionState.Finished, InteractionState.ManFinished):
                return InteractionState.ManFinished
        return InteractionState.manually_graded_state_for_fraction(fraction)


_ActiveStates = frozenset({
    InteractionState.NotStarted,
    InteractionState.Todo,
    InteractionState.Invalid,
    InteractionState.Complete,
})

_GradedStates = frozenset({
    InteractionState.GradedWrong,
    InteractionState.GradedPartial,
    InteractionState.GradedRight,
})

_ManuallyGradedStates = frozenset({
    InteractionState.ManGradedWrong,
    InteractionState.ManGradedPartial,
    InteractionState.ManGradedRight,
})

_CommentedStates = _ManuallyGradedStates | {InteractionState.ManFinished, InteractionState.ManGaveUp}
