import gc

import pytest

from lights_out.game import (
    Cell,
    CellVariant,
    GameSession,
    Grid,
    SessionState,
    format_clock,
)


def lit_positions(grid: Grid):
    return {(cell.row, cell.column) for cell in grid if cell.is_lit()}


def cyclic_grid(state: int = 1) -> Grid:
    return Grid(
        [[Cell(row, column, CellVariant.CYCLIC4, state) for column in range(5)] for row in range(5)]
    )


class Recorder:
    def __init__(self):
        self.calls = []

    def on_change(self, grid):
        self.calls.append(grid)


def test_fresh_grid_is_solved():
    grid = Grid()

    assert grid.size == 5
    assert grid.is_solved()
    assert all(cell.state == 0 for cell in grid)


def test_single_lit_cell_is_not_solved():
    grid = Grid()
    grid.cell(3, 1).toggle()

    assert not grid.is_solved()


@pytest.mark.parametrize(
    "position, expected",
    [
        ((2, 2), {(2, 2), (1, 2), (3, 2), (2, 1), (2, 3)}),
        ((1, 3), {(1, 3), (0, 3), (2, 3), (1, 2), (1, 4)}),
        ((0, 0), {(0, 0), (1, 0), (0, 1)}),
        ((4, 4), {(4, 4), (3, 4), (4, 3)}),
        ((0, 2), {(0, 2), (1, 2), (0, 1), (0, 3)}),
    ],
)
def test_activation_toggles_plus_shape_within_bounds(position, expected):
    grid = Grid()
    grid.activate(*position)

    assert lit_positions(grid) == expected


def test_activation_without_propagation_toggles_only_target():
    grid = Grid(propagate_neighbors=False)
    recorder = Recorder()
    grid.add_listener(recorder.on_change)

    grid.activate(2, 2)

    assert lit_positions(grid) == {(2, 2)}
    assert recorder.calls == [grid]


def test_propagation_can_be_switched_at_runtime():
    grid = Grid(propagate_neighbors=False)
    grid.set_propagate_neighbors(True)
    grid.activate(0, 0)

    assert grid.propagate_neighbors
    assert lit_positions(grid) == {(0, 0), (1, 0), (0, 1)}


def test_activating_twice_restores_binary_grid():
    grid = Grid()
    grid.activate(1, 1)
    before = grid.states()

    grid.activate(3, 2)
    grid.activate(3, 2)

    assert grid.states() == before


def test_cyclic_grid_restores_after_three_activations():
    grid = cyclic_grid(state=1)
    before = grid.states()

    for _ in range(3):
        grid.activate(2, 2)

    assert grid.states() == before


def test_cyclic_cell_skips_zero_when_wrapping():
    cell = Cell(0, 0, CellVariant.CYCLIC4, 1)
    visited = []
    lit = [cell.is_lit()]
    for _ in range(3):
        cell.toggle()
        visited.append(cell.state)
        lit.append(cell.is_lit())

    assert visited == [2, 3, 1]
    assert lit == [False, True, True, False]


def test_cyclic_cell_leaves_zero_and_never_returns():
    cell = Cell(0, 0, CellVariant.CYCLIC4, 0)
    assert not cell.is_lit()

    seen = []
    for _ in range(8):
        cell.toggle()
        seen.append(cell.state)

    assert seen == [1, 2, 3, 1, 2, 3, 1, 2]


def test_binary_cell_accepts_booleans():
    assert Cell(0, 0, CellVariant.BINARY, True).is_lit()
    assert not Cell(0, 0, CellVariant.BINARY, False).is_lit()


@pytest.mark.parametrize(
    "variant, state",
    [(CellVariant.CYCLIC4, 4), (CellVariant.CYCLIC4, -1), (CellVariant.BINARY, 2)],
)
def test_invalid_initial_state_is_rejected(variant, state):
    with pytest.raises(ValueError):
        Cell(1, 1, variant, state)


@pytest.mark.parametrize("state", ["1", 2.7, None])
def test_non_integer_state_is_rejected(state):
    with pytest.raises(ValueError):
        Cell(1, 1, CellVariant.CYCLIC4, state)


def test_cell_variant_is_immutable():
    cell = Cell(0, 0)

    with pytest.raises(AttributeError):
        cell.variant = CellVariant.CYCLIC4


def test_variant_from_name_accepts_aliases():
    assert CellVariant.from_name("coloured") is CellVariant.CYCLIC4
    assert CellVariant.from_name("Binary") is CellVariant.BINARY
    with pytest.raises(ValueError):
        CellVariant.from_name("hexagonal")


def test_out_of_range_activation_fails_without_side_effects():
    grid = Grid()
    recorder = Recorder()
    grid.add_listener(recorder.on_change)

    with pytest.raises(IndexError):
        grid.activate(5, 0)
    with pytest.raises(IndexError):
        grid.activate(0, -1)

    assert grid.is_solved()
    assert recorder.calls == []


def test_supplied_cells_must_match_board_shape():
    with pytest.raises(ValueError):
        Grid([[Cell(0, column) for column in range(5)]])
    with pytest.raises(ValueError):
        Grid([[Cell(0, 0) for _ in range(5)] for _ in range(5)])


def test_listener_is_called_once_per_activation():
    grid = Grid()
    calls = []
    grid.add_listener(calls.append)

    grid.activate(0, 0)
    grid.activate(4, 4)

    assert calls == [grid, grid]


def test_removed_listener_is_not_called():
    grid = Grid()
    recorder = Recorder()
    grid.add_listener(recorder.on_change)
    grid.remove_listener(recorder.on_change)

    grid.activate(2, 2)

    assert recorder.calls == []


def test_grid_does_not_keep_bound_listeners_alive():
    grid = Grid()
    recorder = Recorder()
    grid.add_listener(recorder.on_change)

    del recorder
    gc.collect()
    grid.activate(2, 2)

    assert grid._listeners == []


def test_copy_is_independent_and_render_text():
    grid = Grid()
    grid.activate(0, 0)
    clone = grid.copy()
    clone.activate(4, 4)

    assert grid.render_text().splitlines() == ["XXOOO", "XOOOO", "OOOOO", "OOOOO", "OOOOO"]
    assert lit_positions(clone) == {(0, 0), (1, 0), (0, 1), (4, 4), (3, 4), (4, 3)}


def test_disable_only_sets_flag():
    grid = Grid()
    grid.disable()

    assert not grid.enabled
    grid.activate(2, 2)
    assert not grid.is_solved()


# ----------------------------------------------------------------------
# Sessions


def plus_grid() -> Grid:
    grid = Grid()
    grid.activate(2, 2)
    return grid


def test_session_wins_when_board_is_solved():
    session = GameSession(plus_grid())

    session.activate(2, 2)

    assert session.state is SessionState.WON
    assert session.moves == 0
    assert session.is_over


def test_session_counts_moves_until_win():
    session = GameSession(plus_grid())

    session.activate(0, 0)
    session.activate(0, 0)
    assert session.state is SessionState.PLAYING
    assert session.moves == 2

    session.activate(2, 2)
    assert session.state is SessionState.WON
    assert session.moves == 2


def test_won_session_rejects_moves():
    session = GameSession(plus_grid())
    session.activate(2, 2)

    with pytest.raises(RuntimeError):
        session.activate(0, 0)


def test_session_notices_direct_grid_activations():
    grid = plus_grid()
    session = GameSession(grid)

    grid.activate(2, 2)

    assert session.state is SessionState.WON


def test_session_listeners_receive_transitions():
    session = GameSession(plus_grid())
    states = []
    session.add_listener(lambda current: states.append(current.state))

    session.activate(2, 2)

    assert states == [SessionState.WON]


def test_tick_past_time_limit_disables_session():
    grid = plus_grid()
    session = GameSession(grid, time_limit_seconds=30, time_limit_enabled=True)

    assert session.on_tick(30) is SessionState.PLAYING
    assert session.remaining_seconds == 0
    assert session.on_tick(31) is SessionState.DISABLED
    assert not grid.enabled
    assert not session.accepting_input
    with pytest.raises(RuntimeError):
        session.activate(2, 2)


def test_tick_ignores_limit_when_disabled_or_zero():
    unlimited = GameSession(plus_grid(), time_limit_seconds=0, time_limit_enabled=True)
    switched_off = GameSession(plus_grid(), time_limit_seconds=10)

    assert unlimited.on_tick(500) is SessionState.PLAYING
    assert switched_off.on_tick(500) is SessionState.PLAYING
    assert unlimited.remaining_seconds is None


def test_won_session_is_not_disabled_by_later_ticks():
    session = GameSession(plus_grid(), time_limit_seconds=5, time_limit_enabled=True)
    session.on_tick(3)
    session.activate(2, 2)

    assert session.on_tick(60) is SessionState.WON
    assert session.elapsed_seconds == 3
    assert session.time_status() == "Time taken: 0:03 - 0:02 left"


def test_disabled_session_keeps_its_final_time():
    session = GameSession(plus_grid(), time_limit_seconds=5, time_limit_enabled=True)
    session.on_tick(6)

    assert session.on_tick(20) is SessionState.DISABLED
    assert session.elapsed_seconds == 6


def test_time_status_text():
    session = GameSession(plus_grid(), time_limit_seconds=90)
    session.on_tick(65)
    assert session.time_status() == "Time taken: 1:05"

    session.enable_time_limit()
    session.on_tick(70)
    assert session.time_status() == "Time taken: 1:10 - 0:20 left"

    session.on_tick(91)
    assert session.time_status() == "Times up!"


def test_closed_session_stops_observing_grid():
    grid = plus_grid()
    session = GameSession(grid)
    session.close()

    grid.activate(2, 2)

    assert session.state is SessionState.PLAYING


def test_negative_time_limit_is_rejected():
    with pytest.raises(ValueError):
        GameSession(Grid(), time_limit_seconds=-1)


def test_format_clock_pads_seconds():
    assert format_clock(0) == "0:00"
    assert format_clock(125) == "2:05"
