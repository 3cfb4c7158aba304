"""Tests for railpath/track.py — angle fold and position pass."""

from __future__ import annotations

import random

import pytest

from railpath.constants import MIDSPIN
from railpath.track import (
    AngleState,
    angle_step,
    build_tiles,
    group_by_floor,
    joints,
    resolved_headings,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def tiles_for(headings, actions=None):
    """Build tiles from headings and a {floor: [actions]} mapping."""
    actions = actions or {}
    n = len(headings)
    per_tile = [list(actions.get(i, [])) for i in range(n)]
    return build_tiles(list(headings), per_tile, [[] for _ in range(n)])


TWIRL = {"eventType": "Twirl"}


# ---------------------------------------------------------------------------
# angle_step
# ---------------------------------------------------------------------------

class TestAngleStep:
    def test_straight_is_half_turn(self):
        step, state = angle_step(AngleState(180, 0), 0, 0, 0, 0)
        assert step.relative_angle == 180
        assert state == AngleState(180, 0)

    def test_zero_difference_forced_to_full_turn(self):
        step, _ = angle_step(AngleState(90, 0), 90, 0, 0, 0)
        assert step.relative_angle == 360

    def test_negative_difference_normalized(self):
        step, _ = angle_step(AngleState(180, 0), 270, 0, 0, 0)
        assert step.relative_angle == 270

    def test_twirl_on_tile_flips_before_computing(self):
        step, state = angle_step(AngleState(180, 0), 90, 0, 0, 1)
        assert step.relative_angle == 270
        assert step.twirl_parity == 1
        assert state.twirl_count == 1

    def test_midspin_takes_raw_previous_heading(self):
        step, state = angle_step(AngleState(270, 3), MIDSPIN, 90, 90, 0)
        assert step.relative_angle == 0
        assert step.direction == 90
        assert state == AngleState(90, 3)

    def test_midspin_still_counts_its_twirls(self):
        step, state = angle_step(AngleState(270, 3), MIDSPIN, 90, 90, 1)
        assert step.relative_angle == 0
        assert step.twirl_parity == 0
        assert state == AngleState(90, 4)


# ---------------------------------------------------------------------------
# Relative angles
# ---------------------------------------------------------------------------

class TestRelativeAngles:
    def test_straight_line(self):
        tiles = tiles_for([0, 0, 0])
        assert [t.relative_angle for t in tiles] == [180, 180, 180]

    def test_midspin_inherits_predecessor(self):
        tiles = tiles_for([0, MIDSPIN, 0])
        mid = tiles[1]
        assert mid.is_midspin
        assert mid.relative_angle == 0
        assert mid.direction == 0
        assert mid.code == MIDSPIN
        # Reference heading after the midspin is the raw 0, so tile 2 loops fully.
        assert tiles[2].relative_angle == 360

    def test_midspin_at_first_tile_inherits_zero(self):
        tiles = tiles_for([MIDSPIN, 90])
        assert tiles[0].direction == 0
        assert tiles[1].relative_angle == 270

    def test_turns_without_twirl(self):
        tiles = tiles_for([0, 90, 0, 90, 0])
        assert [t.relative_angle for t in tiles] == [180, 90, 270, 90, 270]

    def test_twirl_flips_from_its_floor_onward(self):
        tiles = tiles_for([0, 90, 0, 90, 0], {2: [TWIRL]})
        assert [t.relative_angle for t in tiles] == [180, 90, 90, 270, 90]
        assert [t.twirl_parity for t in tiles] == [0, 0, 1, 1, 1]

    def test_second_twirl_restores(self):
        tiles = tiles_for([0, 90, 0, 90, 0], {2: [TWIRL], 3: [TWIRL]})
        assert [t.relative_angle for t in tiles] == [180, 90, 90, 90, 270]
        assert [t.twirl_parity for t in tiles] == [0, 0, 1, 0, 0]

    def test_twirl_on_midspin_flips_later_tiles(self):
        tiles = tiles_for([0, MIDSPIN, 90, 0], {1: [TWIRL]})
        assert [t.twirl_parity for t in tiles] == [0, 1, 1, 1]
        assert tiles[1].relative_angle == 0
        assert tiles[2].relative_angle == 90

    @pytest.mark.parametrize("seed", range(8))
    def test_relative_angle_always_positive(self, seed):
        rng = random.Random(seed)
        headings = [rng.randrange(0, 360, 15) for _ in range(60)]
        for i in rng.sample(range(1, 60), 8):
            headings[i] = MIDSPIN
        actions = {i: [TWIRL] for i in rng.sample(range(60), 10)}
        for tile in tiles_for(headings, actions):
            if tile.is_midspin:
                assert tile.relative_angle == 0
            else:
                assert 0 < tile.relative_angle <= 360

    def test_replay_is_deterministic(self):
        headings = [0, 45, 90, MIDSPIN, 270, 15, 0]
        actions = {1: [TWIRL], 4: [TWIRL, {"eventType": "Pause", "duration": 2}]}
        assert tiles_for(headings, actions) == tiles_for(headings, actions)

    def test_indices_are_contiguous(self):
        tiles = tiles_for([0, 90, 180, 270])
        assert [t.index for t in tiles] == [0, 1, 2, 3]


# ---------------------------------------------------------------------------
# Position pass
# ---------------------------------------------------------------------------

class TestPositions:
    def test_straight_line_positions(self):
        tiles = tiles_for([0, 0, 0])
        for tile, expected in zip(tiles, [(1, 0), (2, 0), (3, 0)]):
            assert tile.position == pytest.approx(expected)

    def test_quarter_turn(self):
        tiles = tiles_for([0, 90, 180])
        assert tiles[1].position == pytest.approx((1, 1))
        assert tiles[2].position == pytest.approx((0, 1))

    def test_positions_rounded_to_eight_places(self):
        tiles = tiles_for([15, 15])
        x, y = tiles[0].position
        assert x == round(x, 8)
        assert y == round(y, 8)

    def test_midspin_doubles_back(self):
        tiles = tiles_for([0, MIDSPIN, 0])
        assert tiles[1].position == pytest.approx((0, 0))
        assert tiles[2].position == pytest.approx((1, 0))

    def test_position_track_offset(self):
        move = {"eventType": "PositionTrack", "positionOffset": [0, 2]}
        tiles = tiles_for([0, 0, 0], {1: [move]})
        assert tiles[0].position == pytest.approx((1, 0))
        assert tiles[1].position == pytest.approx((2, 2))
        assert tiles[2].position == pytest.approx((3, 2))

    @pytest.mark.parametrize("flag", [True, "Enabled"])
    def test_editor_only_offset_ignored(self, flag):
        move = {"eventType": "PositionTrack", "positionOffset": [5, 5], "editorOnly": flag}
        tiles = tiles_for([0, 0], {1: [move]})
        assert tiles[1].position == pytest.approx((2, 0))

    def test_position_track_null_component(self):
        move = {"eventType": "PositionTrack", "positionOffset": [None, 1]}
        tiles = tiles_for([0, 0], {0: [move]})
        assert tiles[0].position == pytest.approx((1, 1))

    def test_joint_headings_recorded(self):
        tiles = tiles_for([0, 90, 180])
        assert tiles[0].incoming_heading == 0
        assert tiles[0].outgoing_heading == -180
        assert tiles[1].incoming_heading == 90
        assert tiles[1].outgoing_heading == -180
        assert tiles[2].outgoing_heading == -90
        assert all(t.closing_heading == 360 for t in tiles)

    def test_empty_path(self):
        assert tiles_for([]) == []


# ---------------------------------------------------------------------------
# Helpers under test
# ---------------------------------------------------------------------------

def test_resolved_headings_replace_midspins():
    assert resolved_headings([90, MIDSPIN, MIDSPIN]) == [90, 270, 450]


def test_joints_include_closing_step():
    steps = joints([0, 90])
    assert len(steps) == 3
    assert steps[2].incoming == 90
    assert steps[2].outgoing == -90


def test_group_by_floor_strips_floor_and_drops_out_of_range():
    grouped = group_by_floor(
        [
            {"floor": 0, "eventType": "Twirl"},
            {"floor": 2, "eventType": "Pause"},
            {"floor": 5, "eventType": "Flash"},
            {"eventType": "Hold"},
        ],
        3,
    )
    assert grouped == [[{"eventType": "Twirl"}], [], [{"eventType": "Pause"}]]
