"""Tagged success/failure values returned by adapters and the engine."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Ok[T]:
    value: T


@dataclass(frozen=True, slots=True)
class Err[E: Exception]:
    error: E


type Result[T, E: Exception] = Ok[T] | Err[E]
