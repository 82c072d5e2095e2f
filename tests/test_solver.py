import random

import pytest

from algorithms.builders import (
    BUILDERS,
    create_btree_maze,
    create_empty_maze,
    create_simple_maze,
    create_tree_maze,
)
from algorithms.solver import RecursiveSolver, recursive_solve
from client import LocalDaedalus
from config import Settings
from game import Maze, SessionManager
from maze import E, Grid, add_wall


def setup(grid, start, treasure):
    manager = SessionManager(Settings(width=grid.width, height=grid.height, times=1))
    m = Maze(grid, builder="test")
    m.set_start_point(*start)
    m.set_treasure(*treasure)
    manager.current = m
    manager.current_builder = 0
    return manager, m


def test_empty_maze_takes_manhattan_distance():
    manager, m = setup(create_empty_maze(5, 5), (0, 0), (4, 4))
    assert recursive_solve(LocalDaedalus(manager), m.discover(0, 0))
    assert m.steps_taken == 8
    assert manager.scores == [8]


def test_right_then_down_bias():
    manager, m = setup(create_empty_maze(3, 3), (0, 0), (0, 2))
    solver = RecursiveSolver(LocalDaedalus(manager))
    assert solver.solve(m.discover(0, 0))
    # sweeps right along row 0, down the east side, then back west along row 2
    assert m.steps_taken == 6


def test_dead_end_walks_back_to_start():
    g = Grid(4, 1)
    for x in range(4):
        g.get_room(x, 0).walls.top = True
        g.get_room(x, 0).walls.bottom = True
    g.get_room(0, 0).walls.left = True
    g.get_room(3, 0).walls.right = True
    # treasure sealed off behind a wall
    add_wall(g, 1, 0, E)

    manager, m = setup(g, (0, 0), (3, 0))
    solver = RecursiveSolver(LocalDaedalus(manager))
    assert not solver.solve(m.discover(0, 0))
    assert m.icarus == (0, 0)
    # one step out, one step back
    assert m.steps_taken == 2
    assert manager.scores == []


@pytest.mark.parametrize("builder", [create_simple_maze, create_btree_maze, create_tree_maze])
@pytest.mark.parametrize("seed", range(5))
def test_perfect_mazes_are_solved_within_bound(builder, seed):
    rnd = random.Random(seed)
    w, h = rnd.randint(2, 9), rnd.randint(2, 9)
    grid = builder(w, h, rnd)
    m = Maze(grid)
    m.place_objects(rnd)
    manager, m = setup(grid, m.start, m.end)

    assert recursive_solve(LocalDaedalus(manager), m.discover(*m.start))
    assert m.icarus == m.end
    assert m.steps_taken <= (w * h) ** 2


@pytest.mark.parametrize("name", list(BUILDERS))
def test_every_builder_is_solvable(name):
    rnd = random.Random(21)
    grid = BUILDERS[name](11, 10, rnd)
    m = Maze(grid)
    m.place_objects(rnd)
    manager, m = setup(grid, m.start, m.end)
    assert recursive_solve(LocalDaedalus(manager), m.discover(*m.start))


def test_large_maze_does_not_hit_recursion_limit():
    rnd = random.Random(99)
    grid = create_tree_maze(60, 60, rnd)
    manager, m = setup(grid, (0, 0), (59, 59))
    assert recursive_solve(LocalDaedalus(manager), m.discover(0, 0))
    assert m.icarus == (59, 59)
