"""AsyncPhase: the lifecycle of one load attempt.

A phase is always exactly one of ``Empty``, ``Success`` or ``Failure``.
Controllers replace the whole value on every transition; variants are frozen.
"""

from __future__ import annotations

import dataclasses
import typing


@dataclasses.dataclass(frozen=True, slots=True)
class Empty:
    """No result yet (initial and reset state)."""


@dataclasses.dataclass(frozen=True, slots=True)
class Success[T]:
    """The attempt produced a decoded asset."""

    value: T


@dataclasses.dataclass(frozen=True, slots=True, eq=False)
class Failure:
    """The attempt ended with an error.

    Compared by identity of the held error; exceptions have no value equality.
    """

    error: BaseException

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Failure):
            return NotImplemented
        return self.error is other.error

    def __hash__(self) -> int:
        return hash(id(self.error))


type AsyncPhase[T] = Empty | Success[T] | Failure

EMPTY: typing.Final[Empty] = Empty()


def is_settled(phase: AsyncPhase[typing.Any]) -> bool:
    """Return True when *phase* is terminal for its attempt."""
    return isinstance(phase, (Success, Failure))
