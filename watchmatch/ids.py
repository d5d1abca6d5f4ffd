"""
Identifier generation for Match and QuizAttempt records.

Generators are plain callables returning a new string id on each call, so
tests can inject a deterministic sequence and assert exact ids.
"""

import itertools
import uuid
from typing import Callable

IdGenerator = Callable[[], str]


def uuid_id_generator(prefix: str) -> IdGenerator:
    """Return a generator producing ids like ``match_3f2a...``."""
    def generate() -> str:
        return f"{prefix}_{uuid.uuid4().hex}"
    return generate


class SequentialIdGenerator:
    """
    Deterministic id generator: ``prefix_1``, ``prefix_2``, ...

    Attributes:
        prefix: String prepended to every id
    """

    def __init__(self, prefix: str, start: int = 1):
        self.prefix = prefix
        self._counter = itertools.count(start)

    def __call__(self) -> str:
        return f"{self.prefix}_{next(self._counter)}"
