# algorithms/solver.py
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Set, Tuple

from maze import E, S, W, N, TOKENS, BlockedByWall, Survey, Victory, reverse, shift

Vec = Tuple[int, int]

log = logging.getLogger("labyrinth.solver")

# Icarus has a right and bottom bias
PRIORITY = (E, S, W, N)


@dataclass
class _Frame:
    pos: Vec
    survey: Survey
    came_by: str = ""
    pending: Iterator[str] = field(default_factory=lambda: iter(PRIORITY))


class RecursiveSolver:
    """
    Backtracking solver. Icarus only ever sees the four walls of the room
    he stands in, so positions are relative to where he woke up.

    Each open, unvisited direction is tried in PRIORITY order; when a
    branch dead-ends the solver walks back with the opposite move before
    trying the next direction. The walk is driven by an explicit stack of
    frames rather than Python recursion, which issues exactly the same
    moves without being bounded by the interpreter's recursion limit.

    `link` is anything with move(token) -> Survey that raises Victory on
    reaching the treasure and BlockedByWall when the move is refused.
    """

    def __init__(self, link):
        self.link = link
        self.visited: Set[Vec] = set()
        self.moves = 0

    def solve(self, survey: Survey, origin: Vec = (0, 0)) -> bool:
        self.visited.add(origin)
        stack: List[_Frame] = [_Frame(origin, survey)]

        while stack:
            frame = stack[-1]
            child = None
            for d in frame.pending:
                if frame.survey.has_wall(d):
                    continue
                nxt = shift(frame.pos[0], frame.pos[1], d)
                if nxt in self.visited:
                    continue
                try:
                    s = self._move(d)
                except Victory:
                    return True
                except BlockedByWall:
                    log.debug("refused %s at %s", TOKENS[d], frame.pos)
                    continue
                self.visited.add(nxt)
                child = _Frame(nxt, s, came_by=d)
                break

            if child is not None:
                stack.append(child)
                continue

            # dead end: step back to where we came from
            stack.pop()
            if frame.came_by:
                self._move(reverse(frame.came_by))

        return False

    def _move(self, d: str) -> Survey:
        self.moves += 1
        return self.link.move(TOKENS[d])


def recursive_solve(link, survey: Survey) -> bool:
    """Solve from a fresh survey, returning True once the treasure is reached."""
    return RecursiveSolver(link).solve(survey)
