# algorithms/selector.py
from __future__ import annotations
import logging
import math
import random
from typing import Dict, List, Optional

from .builders import BUILDERS, Builder

log = logging.getLogger("labyrinth.selector")


class BuilderSelector:
    """
    Keeps tabs on how Icarus fares with each kind of maze and picks the
    next builder with a bias towards the ones that cost him the most
    steps.

    Warm-up: plain round robin until `warmup` sessions have been
    completed, where warmup = max(len(builders)**2, floor(sqrt(times))).
    After that, each builder is drawn with probability proportional to
    its accumulated step count.
    """

    def __init__(
        self,
        times: int = 1,
        builders: Optional[Dict[str, Builder]] = None,
        rnd: Optional[random.Random] = None,
    ):
        self.builders: Dict[str, Builder] = dict(builders if builders is not None else BUILDERS)
        if not self.builders:
            raise ValueError("selector needs at least one builder")
        self.names: List[str] = list(self.builders)
        self.scorecard: List[int] = [0] * len(self.names)
        self.last: int = -1
        self.completed: int = 0
        self.rnd = rnd or random.Random()

        n = len(self.names)
        self.warmup = max(n * n, math.isqrt(max(times, 0)))

    @property
    def warming_up(self) -> bool:
        return self.completed < self.warmup

    def record(self, index: int, steps: int) -> None:
        """Credit a finished session's step count to the builder that made its maze."""
        self.scorecard[index] += steps
        self.completed += 1
        log.debug("scorecard %s", dict(zip(self.names, self.scorecard)))

    def pick(self) -> int:
        """Choose the builder for the next maze and return its index."""
        n = len(self.names)
        if self.warming_up:
            self.last = (self.last + 1) % n
            return self.last

        total = sum(self.scorecard)
        if total <= 0:
            # nothing scored yet: every builder is as good as any other
            self.last = self.rnd.randrange(n)
            return self.last

        r = self.rnd.randrange(total)
        acc = 0
        for i, v in enumerate(self.scorecard):
            acc += v
            if r < acc:
                self.last = i
                break
        return self.last

    def builder(self, index: int) -> Builder:
        return self.builders[self.names[index]]

    def stats(self) -> Dict[str, int]:
        return dict(zip(self.names, self.scorecard))
