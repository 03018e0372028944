from labyrinth.maze import Maze
from labyrinth.systems.pathfinding.astar import find_path, path_length
from labyrinth.world.position import Dim, Pos


def make_maze(w=7, h=8, rooms=()):
    maze = Maze("test", Dim(w, h))
    for x, y in rooms:
        maze.rooms.set(Pos(x, y), True)
    return maze


def open_rect(maze, x0, y0, x1, y1):
    for y in range(y0, y1 + 1):
        for x in range(x0, x1 + 1):
            maze.rooms.set(Pos(x, y), True)


def assert_valid_path(maze, start, path):
    previous = start
    for step in path[:-1]:
        assert maze.is_room(step)
        assert previous.is_adjacent(step)
        previous = step
    assert previous.is_adjacent(path[-1])


def test_open_square_path_has_manhattan_length():
    maze = make_maze()
    open_rect(maze, 1, 1, 3, 3)
    start, goal = Pos(1, 1), Pos(3, 3)
    path = find_path(maze, start, goal)
    assert path is not None
    assert len(path) == 4
    assert path[-1] == goal
    assert start not in path
    assert_valid_path(maze, start, path)


def test_enclosed_goal_has_no_path():
    maze = make_maze(rooms=[(1, 1), (2, 1), (1, 2), (5, 5)])
    assert find_path(maze, Pos(1, 1), Pos(5, 5)) is None
    assert path_length(maze, Pos(1, 1), Pos(5, 5)) is None


def test_trivial_paths():
    maze = make_maze(rooms=[(2, 2), (3, 2)])
    assert find_path(maze, Pos(2, 2), Pos(2, 2)) == []
    assert find_path(maze, Pos(2, 2), Pos(3, 2)) == [Pos(3, 2)]


def test_goal_may_be_a_wall():
    # exit candidates are border walls next to a room
    maze = make_maze()
    open_rect(maze, 1, 1, 3, 3)
    goal = Pos(0, 3)
    assert maze.is_wall(goal)
    path = find_path(maze, Pos(3, 1), goal)
    assert path is not None
    assert path[-1] == goal
    assert path[-2] == Pos(1, 3)
    assert len(path) == 5
    assert_valid_path(maze, Pos(3, 1), path)


def test_path_follows_corridor():
    maze = make_maze(w=9, h=8)
    corridor = [(1, 1), (2, 1), (3, 1), (3, 2), (3, 3), (4, 3), (5, 3), (5, 4), (5, 5)]
    for x, y in corridor:
        maze.rooms.set(Pos(x, y), True)
    path = find_path(maze, Pos(1, 1), Pos(5, 5))
    assert path == [Pos(x, y) for x, y in corridor[1:]]
