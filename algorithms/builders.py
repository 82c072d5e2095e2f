# algorithms/builders.py
from __future__ import annotations
import random
from typing import Callable, Dict, List, Optional, Tuple

from maze import Grid, N, E, S, W, add_wall, rm_wall, shift, is_valid

Vec = Tuple[int, int]
Builder = Callable[..., Grid]


def empty_grid(w: int, h: int) -> Grid:
    """No walls at all. Starting point for additive builders."""
    return Grid(w, h, walled=False)


def full_grid(w: int, h: int) -> Grid:
    """Every wall present. Starting point for subtractive builders."""
    return Grid(w, h, walled=True)


def add_external_walls(grid: Grid) -> None:
    """Enclose the maze. Single-room mutation: there is no room on the other side."""
    w, h = grid.width, grid.height
    for x in range(w):
        grid.get_room(x, 0).add_wall(N)
        grid.get_room(x, h - 1).add_wall(S)
    for y in range(h):
        grid.get_room(0, y).add_wall(W)
        grid.get_room(w - 1, y).add_wall(E)


def create_empty_maze(w: int, h: int, rnd: Optional[random.Random] = None) -> Grid:
    """Nothing inside but air. Wall huggers have a hard time here."""
    grid = empty_grid(w, h)
    add_external_walls(grid)
    return grid


def create_simple_maze(w: int, h: int, rnd: Optional[random.Random] = None) -> Grid:
    """
    One long serpentine corridor. Each row is open except for a wall to
    the south with a single gap, alternating between the east end (even
    rows) and the west end (odd rows). Depending on where Icarus and the
    treasure land this can cost ~2*N steps for N rooms.
    """
    grid = empty_grid(w, h)
    for y in range(h - 1):
        s, e = 0, w
        if y % 2 == 0:
            e -= 1
        else:
            s += 1
        for x in range(s, e):
            add_wall(grid, x, y, S)

    add_external_walls(grid)
    return grid


def create_ring_maze(w: int, h: int, rnd: Optional[random.Random] = None) -> Grid:
    """
    Concentric rings, each with one door. Doors alternate between the
    north-west and south-east corners so reaching the next ring means
    walking all the way around. From 100 rooms up, rings are spaced two
    apart, leaving wide open bands for backtrackers to wander through.
    """
    grid = empty_grid(w, h)
    step = 2 if w * h >= 100 else 1

    y = step
    # a ring spans [y, w-y-1] x [y, h-y-1]; stop once that is empty
    while y <= w - y - 1 and y <= h - y - 1:
        for x in range(y, w - y):
            add_wall(grid, x, y, N)
            add_wall(grid, x, h - y - 1, S)
        for j in range(y, h - y):
            add_wall(grid, y, j, W)
            add_wall(grid, w - y - 1, j, E)

        if (y // step) % 2 == 0:
            rm_wall(grid, y, y, W)
        else:
            rm_wall(grid, w - y - 1, h - y - 1, E)
        y += step

    add_external_walls(grid)
    return grid


def create_btree_maze(w: int, h: int, rnd: Optional[random.Random] = None) -> Grid:
    """
    Binary tree: every room opens north or west at random. The result is
    a perfect maze with a long hallway along the north and west borders.
    """
    rnd = rnd or random
    grid = full_grid(w, h)

    for y in range(h):
        for x in range(w):
            dirs: List[str] = []
            if y != 0:
                dirs.append(N)
            if x != 0:
                dirs.append(W)
            if dirs:
                rm_wall(grid, x, y, rnd.choice(dirs))

    add_external_walls(grid)
    return grid


def create_tree_maze(w: int, h: int, rnd: Optional[random.Random] = None) -> Grid:
    """Randomized depth-first carve from a random room. Perfect and as random as it gets."""
    rnd = rnd or random
    grid = full_grid(w, h)

    stack: List[Vec] = [(rnd.randrange(w), rnd.randrange(h))]
    visited = [[False] * w for _ in range(h)]

    while stack:
        x, y = stack.pop()
        visited[y][x] = True

        neighbours = []
        for d in (N, E, S, W):
            nx, ny = shift(x, y, d)
            if is_valid(nx, ny, w, h) and not visited[ny][nx]:
                neighbours.append(d)

        if neighbours:
            d = rnd.choice(neighbours)
            rm_wall(grid, x, y, d)
            # come back to this room once the neighbour's branch is done
            stack.append((x, y))
            stack.append(shift(x, y, d))

    add_external_walls(grid)
    return grid


# Order matters: the selector round-robins through it during warm-up.
BUILDERS: Dict[str, Builder] = {
    "empty": create_empty_maze,
    "simple": create_simple_maze,
    "ring": create_ring_maze,
    "btree": create_btree_maze,
    "tree": create_tree_maze,
}
