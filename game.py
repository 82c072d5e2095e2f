# game.py
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from maze import (
    Grid,
    Survey,
    Vec,
    BlockedByWall,
    MazeSolved,
    NoActiveMaze,
    OutOfBounds,
    PlacementError,
    Victory,
    avg_scores,
    parse_move,
    render_maze,
    render_pretty_maze,
    shift,
)
from algorithms.selector import BuilderSelector
from config import Settings

log = logging.getLogger("labyrinth.game")
render_log = logging.getLogger("labyrinth.render")


@dataclass
class Reply:
    """What the server answers to awake/move."""
    survey: Survey = field(default_factory=Survey)
    victory: bool = False
    message: str = ""
    error: bool = False
    code: str = ""
    steps: int = 0

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "survey": self.survey.to_dict(),
            "victory": self.victory,
            "message": self.message,
            "error": self.error,
            "steps": self.steps,
        }
        if self.code:
            d["code"] = self.code
        return d


class Maze:
    """One labyrinth being solved: rooms, start, treasure, Icarus and his step count."""

    def __init__(self, grid: Grid, builder: str = ""):
        self.grid = grid
        self.builder = builder
        self.start: Optional[Vec] = None
        self.end: Optional[Vec] = None
        self.icarus: Vec = (0, 0)
        self.steps_taken = 0
        self.solved = False

    @property
    def width(self) -> int:
        return self.grid.width

    @property
    def height(self) -> int:
        return self.grid.height

    def get_room(self, x: int, y: int):
        return self.grid.get_room(x, y)

    def set_start_point(self, x: int, y: int) -> None:
        r = self.get_room(x, y)
        if r.treasure:
            raise PlacementError("can't start in the treasure")
        if self.start is not None:
            old = self.get_room(*self.start)
            old.start = False
            old.visited = False
        r.start = True
        r.visited = True
        self.start = (x, y)
        self.icarus = (x, y)

    def set_treasure(self, x: int, y: int) -> None:
        r = self.get_room(x, y)
        if r.start:
            raise PlacementError("can't have the treasure at the start")
        if self.end is not None:
            self.get_room(*self.end).treasure = False
        r.treasure = True
        self.end = (x, y)

    def place_objects(self, rnd: Optional[random.Random] = None) -> None:
        """Drop Icarus and the treasure at random, never on the same room."""
        rnd = rnd or random
        w, h = self.width, self.height
        sx, sy = rnd.randrange(w), rnd.randrange(h)
        self.set_start_point(sx, sy)

        tx, ty = rnd.randrange(w), rnd.randrange(h)
        if tx == sx and ty == sy:
            if tx > 0:
                tx -= 1
            elif w > 1:
                tx += 1
            if ty > 0:
                ty -= 1
            elif h > 1:
                ty += 1
        self.set_treasure(tx, ty)

    def discover(self, x: int, y: int) -> Survey:
        return self.grid.discover(x, y)

    def look_around(self) -> Survey:
        """Survey Icarus's room. Raises Victory when he is on the treasure."""
        if self.end is not None and self.icarus == self.end:
            raise Victory(self.steps_taken)
        return self.discover(*self.icarus)

    def move(self, direction: str) -> None:
        """Move Icarus one room. Refused moves leave position and step count untouched."""
        s = self.look_around()
        if s.has_wall(direction):
            raise BlockedByWall("Can't walk through walls")

        x, y = shift(self.icarus[0], self.icarus[1], direction)
        room = self.get_room(x, y)

        self.icarus = (x, y)
        self.steps_taken += 1
        room.visited = True

    def render(self, pretty: bool = False) -> str:
        if pretty:
            return render_pretty_maze(self.grid, self.icarus)
        return render_maze(self.grid)


class SessionManager:
    """
    Owns the single active maze, the score history and the builder
    selector. One instance per server process; not meant for concurrent
    sessions.
    """

    def __init__(self, settings: Optional[Settings] = None, rnd: Optional[random.Random] = None):
        self.settings = settings or Settings()
        self.settings.validate()
        self.rnd = rnd or random.Random()
        self.selector = BuilderSelector(times=self.settings.times, rnd=self.rnd)
        self.current: Optional[Maze] = None
        self.current_builder: int = -1
        self.scores: List[int] = []
        self._flushed = False

    # ----------------- Lifecycle -----------------

    def new_maze(self) -> Maze:
        if self.current is not None and not self.current.solved:
            log.warning(
                "Abandoning unsolved %s maze after %d steps",
                self.current.builder, self.current.steps_taken,
            )

        idx = self.selector.pick()
        name = self.selector.names[idx]
        grid = self.selector.builder(idx)(self.settings.width, self.settings.height, self.rnd)

        m = Maze(grid, builder=name)
        m.place_objects(self.rnd)
        self.current = m
        self.current_builder = idx
        log.info(
            "Built %s maze %dx%d start=%s treasure=%s",
            name, m.width, m.height, m.start, m.end,
        )
        return m

    def awake(self) -> Reply:
        m = self.new_maze()
        try:
            survey = m.discover(*m.icarus)
        except OutOfBounds:
            log.error("Icarus is outside of the maze at %s. This shouldn't ever happen", m.icarus)
            raise
        render_log.info("\n%s", m.render(self.settings.pretty))
        return Reply(survey=survey)

    def move(self, token: str) -> Reply:
        d = parse_move(token)
        m = self.current
        if m is None:
            raise NoActiveMaze("no maze yet, call awake first")
        if m.solved:
            raise MazeSolved("maze already solved, call awake for a new one")

        try:
            m.move(d)
        except OutOfBounds:
            log.exception("Icarus walked off the %s maze at %s: walls are inconsistent", m.builder, m.icarus)
            raise
        log.debug("Icarus moved %s to %s (%d steps)", token, m.icarus, m.steps_taken)

        try:
            survey = m.look_around()
        except Victory as v:
            self._finish(m)
            return Reply(victory=True, message=str(v), steps=m.steps_taken)
        return Reply(survey=survey, steps=m.steps_taken)

    def _finish(self, m: Maze) -> None:
        m.solved = True
        self.scores.append(m.steps_taken)
        self.selector.record(self.current_builder, m.steps_taken)
        log.info("Victory achieved in %d steps (%s maze)", m.steps_taken, m.builder)

    # ----------------- Results -----------------

    def summary(self) -> Dict[str, Any]:
        return {
            "sessions": len(self.scores),
            "average": avg_scores(self.scores),
            "scorecard": self.selector.stats(),
        }

    def flush(self) -> Dict[str, Any]:
        """Report the results once, however the process ends."""
        s = self.summary()
        if not self._flushed:
            self._flushed = True
            log.info("Labyrinth solved %d times with an avg of %d steps", s["sessions"], s["average"])
        return s
