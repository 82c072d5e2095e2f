# maze.py
from __future__ import annotations
from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional, Tuple

Vec = Tuple[int, int]

# Directions
N = "N"
E = "E"
S = "S"
W = "W"

DELTAS: Dict[str, Vec] = {
    N: (0, -1),
    E: (1, 0),
    S: (0, 1),
    W: (-1, 0),
}

REVERSE: Dict[str, str] = {N: S, S: N, E: W, W: E}

# Wire tokens used by Icarus and the server routes
MOVES: Dict[str, str] = {
    "up": N,
    "right": E,
    "down": S,
    "left": W,
}
TOKENS: Dict[str, str] = {d: t for t, d in MOVES.items()}

# Survey field for each direction
SIDES: Dict[str, str] = {N: "top", E: "right", S: "bottom", W: "left"}


# ----------------- Errors -----------------

class MazeError(Exception):
    """Base class for everything the maze refuses to do."""
    code = "maze_error"


class OutOfBounds(MazeError):
    code = "out_of_bounds"


class BlockedByWall(MazeError):
    code = "blocked"


class InvalidDirection(MazeError):
    code = "invalid_direction"


class PlacementError(MazeError):
    code = "placement"


class NoActiveMaze(MazeError):
    code = "no_maze"


class MazeSolved(MazeError):
    code = "solved"


class SessionBusy(MazeError):
    code = "busy"


class Victory(Exception):
    """Icarus stands on the treasure. Not a fault."""

    def __init__(self, steps: int = 0, message: str = ""):
        self.steps = steps
        super().__init__(message or f"Victory achieved in {steps} steps")


# ----------------- Model -----------------

@dataclass
class Survey:
    """Wall presence around one room. True means a wall."""
    top: bool = False
    right: bool = False
    bottom: bool = False
    left: bool = False

    def has_wall(self, direction: str) -> bool:
        return getattr(self, SIDES[direction])

    def set_wall(self, direction: str, present: bool) -> None:
        setattr(self, SIDES[direction], present)

    def copy(self) -> "Survey":
        return Survey(self.top, self.right, self.bottom, self.left)

    def to_dict(self) -> Dict[str, bool]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "Survey":
        data = data or {}
        return cls(
            top=bool(data.get("top")),
            right=bool(data.get("right")),
            bottom=bool(data.get("bottom")),
            left=bool(data.get("left")),
        )


# The walls of a room and what Icarus sees are the same four flags
WallSet = Survey


@dataclass
class Room:
    walls: WallSet = field(default_factory=WallSet)
    treasure: bool = False
    start: bool = False
    visited: bool = False

    def add_wall(self, direction: str) -> None:
        self.walls.set_wall(direction, True)

    def rm_wall(self, direction: str) -> None:
        self.walls.set_wall(direction, False)


class Grid:
    """Fixed-size rectangle of rooms, indexed rooms[y][x]."""

    def __init__(self, width: int, height: int, walled: bool = False):
        self.width = width
        self.height = height
        self.rooms: List[List[Room]] = [
            [Room(walls=WallSet(walled, walled, walled, walled)) for _ in range(width)]
            for _ in range(height)
        ]

    def get_room(self, x: int, y: int) -> Room:
        if not is_valid(x, y, self.width, self.height):
            raise OutOfBounds(f"room ({x}, {y}) outside of maze boundaries")
        return self.rooms[y][x]

    def discover(self, x: int, y: int) -> Survey:
        return self.get_room(x, y).walls.copy()

    def cells(self):
        for y in range(self.height):
            for x in range(self.width):
                yield x, y


# ----------------- Wall algebra -----------------

def delta(direction: str) -> Vec:
    try:
        return DELTAS[direction]
    except KeyError:
        raise InvalidDirection(f"unknown direction: {direction!r}") from None


def shift(x: int, y: int, direction: str) -> Vec:
    dx, dy = delta(direction)
    return x + dx, y + dy


def reverse(direction: str) -> str:
    try:
        return REVERSE[direction]
    except KeyError:
        raise InvalidDirection(f"unknown direction: {direction!r}") from None


def is_valid(x: int, y: int, w: int, h: int) -> bool:
    return 0 <= x < w and 0 <= y < h


def add_wall(grid: Grid, x: int, y: int, direction: str) -> None:
    """Wall up the edge between (x, y) and its neighbour in direction, on both sides."""
    nx, ny = shift(x, y, direction)
    neighbour = grid.get_room(nx, ny)
    grid.get_room(x, y).add_wall(direction)
    neighbour.add_wall(reverse(direction))


def rm_wall(grid: Grid, x: int, y: int, direction: str) -> None:
    """Open the edge between (x, y) and its neighbour in direction, on both sides."""
    nx, ny = shift(x, y, direction)
    neighbour = grid.get_room(nx, ny)
    grid.get_room(x, y).rm_wall(direction)
    neighbour.rm_wall(reverse(direction))


def parse_move(token: str) -> str:
    """Wire token ('left', 'up', ...) -> direction. Raises InvalidDirection."""
    d = MOVES.get(str(token or "").strip().lower())
    if d is None:
        raise InvalidDirection(f"invalid direction: {token!r}")
    return d


def avg_scores(scores: List[int]) -> int:
    if not scores:
        return 0
    return sum(scores) // len(scores)


# ----------------- Debug rendering -----------------

def render_maze(grid: Grid) -> str:
    """Compact dump: one text row per maze row, bottom and right walls only."""
    lines = ["_" + "___" * grid.width]
    for y in range(grid.height):
        row = "|"
        for x in range(grid.width):
            r = grid.get_room(x, y)
            if r.walls.bottom:
                mark = "⏅_" if r.treasure else "⏂_" if r.start else "__"
            else:
                mark = "⏃ " if r.treasure else "⏀ " if r.start else "  "
            row += mark
            row += "|" if r.walls.right else "_"
        lines.append(row)
    return "\n".join(lines)


def render_pretty_maze(grid: Grid, icarus: Optional[Vec] = None) -> str:
    """3x3 characters per room, showing visited rooms and Icarus."""
    out: List[str] = []
    for y in range(grid.height):
        rows = [[], [], []]
        for x in range(grid.width):
            r = grid.get_room(x, y)
            centre = " "
            if r.visited:
                centre = "·"
            if r.treasure:
                centre = "×"
            elif r.start:
                centre = "⚑"
            if icarus == (x, y):
                centre = "☉"

            rows[0] += ["▛", "▀" if r.walls.top else " ", "▜"]
            rows[1] += ["▌" if r.walls.left else " ", centre, "▐" if r.walls.right else " "]
            rows[2] += ["▙", "▄" if r.walls.bottom else " ", "▟"]
        out.extend("".join(row) for row in rows)
    return "\n".join(out)
