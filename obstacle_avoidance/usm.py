"""A small state machine framework driven by transitions."""

from __future__ import annotations

import abc
import enum
from typing import Generic, TypeVar

StateT = TypeVar("StateT")


class Transition(enum.Enum):
    """Outcome of running a state; REPEAT keeps the current state."""

    REPEAT = enum.auto()
    NEXT1 = enum.auto()
    NEXT2 = enum.auto()
    NEXT3 = enum.auto()
    NEXT4 = enum.auto()
    ERROR = enum.auto()


class StateMachine(abc.ABC, Generic[StateT]):
    """Runs the current state and moves to the next one chosen by the transition."""

    def __init__(self, starting_state: StateT) -> None:
        self._current_state = starting_state

    @property
    def state(self) -> StateT:
        """The current state."""
        return self._current_state

    def iterate_once(self) -> None:
        """Run the current state once and apply the resulting transition."""
        transition = self.run_current_state()
        if transition is not Transition.REPEAT:
            self._current_state = self.choose_next_state(self._current_state, transition)

    @abc.abstractmethod
    def run_current_state(self) -> Transition:
        """Execute the current state and report which transition to take."""

    @abc.abstractmethod
    def choose_next_state(self, current_state: StateT, transition: Transition) -> StateT:
        """The state following ``current_state`` under ``transition``."""