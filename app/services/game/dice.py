"""Die sources. Matches own their die so the engine stays deterministic."""

import random
from collections.abc import Callable, Iterable, Iterator

DieSource = Callable[[], int]


def random_die() -> int:
    return random.randint(1, 6)


class ScriptedDie:
    """Replays a fixed sequence of values, for tests and replays."""

    def __init__(self, values: Iterable[int]):
        self._values: Iterator[int] = iter(values)

    def __call__(self) -> int:
        try:
            return next(self._values)
        except StopIteration:
            raise RuntimeError("Scripted die ran out of values") from None
