from __future__ import annotations

__all__ = [
    "NotReady",
    "Provide",
    "inject",
]

import typing as t

import dependency_injector.wiring as wiring
from dependency_injector.wiring import Provide

from gradeflow.lib.sentinel import NotReady

P = t.ParamSpec("P")
TReturn = t.TypeVar("TReturn")


def inject(fn: t.Callable[P, TReturn]) -> t.Callable[P, TReturn]:
    # wiring.inject is untyped; keep the signature of the decorated function
    return wiring.inject(fn)
