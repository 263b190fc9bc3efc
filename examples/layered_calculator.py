"""Layered calculator: the same pipeline behaves differently per active layer.

Run with ``ENTANGLE_ACTIVE_LAYERS=dev python examples/layered_calculator.py``
to see the logging thorn at work, or with ``prod`` to skip it.
"""

from __future__ import annotations

import logging
import os

from entangle import Entangler, Error, Ok, SeedBuilder, SeedConfig, Thorn, branch

logger = logging.getLogger("layered_calculator")


class LogThorn(Thorn, layers=["dev", "test"]):
    """Logs the state going into and the result coming out of what it wraps."""

    def run(self, next):
        def wrapped(state):
            logger.info("state before: %r", state)
            result = next(state)
            logger.info("result after: %r", result)
            return result

        return wrapped


def add(x):
    return Ok(x + 1)


def subtract(x):
    return Ok(x - 1)


def divide(x):
    if x == 0:
        return Error("null division error")
    return Ok(x / 2)


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    os.environ.setdefault("ENTANGLE_LAYERS", "dev,test,prod")
    os.environ.setdefault("ENTANGLE_ACTIVE_LAYERS", "dev")

    settings = SeedBuilder.from_config(SeedConfig.from_env()).thorn(LogThorn).build()
    compositions = Entangler(seed=settings).entangle(
        "calculate",
        [
            branch(subtract, layers=["prod"]),
            branch(divide, layers=["test", "dev"]),
            branch(subtract),
            branch(add, layers=["test"]),
        ],
    )

    for value in (1, 2, 8):
        print(f"calculate({value}) = {compositions.calculate(value)}")


if __name__ == "__main__":
    main()
