"""
Test suite for the track generator.
"""

import random

import pytest

from field_parser import format_field, parse_field
from pathgen import (
    PRESETS,
    Constraints,
    Coordinate,
    Field,
    GeneratorConfig,
    GridSize,
    SceneNode,
    Segment,
    SegmentKind,
    Side,
    ViolationKind,
    check_field,
    forced_constraints,
    generate,
    generate_from_config,
    parse_grid_size,
    scene_position,
)


class FirstChoice(random.Random):
    """Random source that always picks the first candidate."""

    def choice(self, seq):  # type: ignore[override]
        return seq[0]


class LastChoice(random.Random):
    """Random source that always picks the last candidate."""

    def choice(self, seq):  # type: ignore[override]
        return seq[-1]


FIRST_CHOICE_3X3 = (
    "3x3 | 0,0:S 0,1:BR 1,1:BL 1,0:TR 2,0:TL 2,1:TB 2,2:BL 1,2:LR 0,2:F<R"
)

SIZES = [GridSize(3, 3), GridSize(5, 5), GridSize(10, 10)]


# =============================================================================
# Test Data Structures
# =============================================================================


class TestSegment:
    """Tests for Segment."""

    def test_corridor_openings_come_from_kind(self) -> None:
        segment = Segment(Coordinate(1, 1), SegmentKind.TOP_LEFT)
        assert segment.is_open(Side.UP)
        assert segment.is_open(Side.LEFT)
        assert not segment.is_open(Side.DOWN)
        assert segment.rotation == 90

    def test_finish_opens_toward_arrival(self) -> None:
        """A Finish is open on its arrival side only."""
        segment = Segment(Coordinate(2, 1), SegmentKind.FINISH, arrival=Side.DOWN)
        assert segment.openings == frozenset({Side.DOWN})
        assert segment.rotation == 270

    def test_finish_requires_arrival(self) -> None:
        with pytest.raises(ValueError, match="needs an arrival side"):
            Segment(Coordinate(0, 1), SegmentKind.FINISH)

    def test_corridor_rejects_arrival(self) -> None:
        with pytest.raises(ValueError):
            Segment(Coordinate(0, 1), SegmentKind.TOP_BOTTOM, arrival=Side.UP)

    def test_segments_are_immutable(self) -> None:
        segment = Segment(Coordinate(0, 0), SegmentKind.START)
        with pytest.raises(AttributeError):
            segment.kind = SegmentKind.FINISH  # type: ignore[misc]


class TestField:
    """Tests for Field lookups."""

    def test_rejects_occupied_coordinate(self) -> None:
        """Two segments can never share a cell."""
        with pytest.raises(ValueError, match="already occupied"):
            Field.from_segments(
                GridSize(3, 3),
                [
                    Segment(Coordinate(0, 0), SegmentKind.START),
                    Segment(Coordinate(0, 0), SegmentKind.TOP_BOTTOM),
                ],
            )

    def test_lookup_and_order(self) -> None:
        field = parse_field(FIRST_CHOICE_3X3)
        assert len(field) == 9
        assert field[0].kind is SegmentKind.START
        assert field.get(Coordinate(1, 1)).kind is SegmentKind.BOTTOM_LEFT
        assert field.get(Coordinate(5, 5)) is None
        assert Coordinate(2, 2) in field
        assert [s.coordinate for s in field][:3] == [
            Coordinate(0, 0),
            Coordinate(0, 1),
            Coordinate(1, 1),
        ]

    def test_neighbours(self) -> None:
        field = parse_field("3x3 | 0,0:S 0,1:BR 1,1:BL")
        neighbours = dict(field.neighbours(Coordinate(1, 0)))
        assert set(neighbours) == {Side.LEFT, Side.UP}
        assert neighbours[Side.LEFT].kind is SegmentKind.START
        assert neighbours[Side.UP].kind is SegmentKind.BOTTOM_LEFT

    def test_start_and_finish(self) -> None:
        field = parse_field(FIRST_CHOICE_3X3)
        assert field.start == Segment(Coordinate(0, 0), SegmentKind.START)
        assert field.finish == Segment(Coordinate(0, 2), SegmentKind.FINISH, Side.RIGHT)

    def test_unfinished_field_has_no_finish(self) -> None:
        field = parse_field("3x3 | 0,0:S 0,1:TB")
        assert field.finish is None

    def test_segments_is_a_snapshot(self) -> None:
        field = parse_field(FIRST_CHOICE_3X3)
        assert isinstance(field.segments, tuple)
        assert field.segments == tuple(field)


# =============================================================================
# Test Constraint Derivation
# =============================================================================


class TestForcedConstraints:
    """Tests for forced_constraints."""

    def test_first_step_from_start(self) -> None:
        """The cell above the Start opens down and is closed on the grid edge."""
        field = parse_field("3x3 | 0,0:S")
        constraints = forced_constraints(field, Coordinate(0, 1), Side.DOWN)
        assert constraints == Constraints(
            frozenset({Side.DOWN}), frozenset({Side.LEFT})
        )

    def test_copies_closed_neighbours(self) -> None:
        """A non-predecessor neighbour closed toward the cell forces a closing."""
        field = parse_field("3x3 | 0,0:S 0,1:BR 1,1:BL")
        constraints = forced_constraints(field, Coordinate(1, 0), Side.UP)
        assert constraints.openings == frozenset({Side.UP})
        assert constraints.closings == frozenset({Side.DOWN, Side.LEFT})

    def test_corner_cell_closes_two_edges(self) -> None:
        field = parse_field("3x3 | 0,0:S 0,1:BR 1,1:LR")
        constraints = forced_constraints(field, Coordinate(2, 1), Side.LEFT)
        assert constraints.closings == frozenset({Side.RIGHT})
        constraints = forced_constraints(field, Coordinate(2, 2), Side.DOWN)
        assert constraints.closings == frozenset({Side.UP, Side.RIGHT})

    def test_never_more_than_three_closings(self) -> None:
        field = parse_field("3x3 | 0,0:S 0,1:BR 1,1:BL 1,0:TR 2,0:TL 2,1:TB 2,2:BL 1,2:LR")
        constraints = forced_constraints(field, Coordinate(0, 2), Side.RIGHT)
        assert constraints.openings == frozenset({Side.RIGHT})
        assert constraints.closings == frozenset({Side.UP, Side.LEFT, Side.DOWN})

    def test_copies_open_neighbours(self) -> None:
        """A placed neighbour open toward the cell forces an opening."""
        field = parse_field("4x4 | 0,0:S 0,1:TB")
        constraints = forced_constraints(field, Coordinate(0, 2), Side.RIGHT)
        assert Side.DOWN in constraints.openings
        assert constraints == Constraints(
            frozenset({Side.RIGHT, Side.DOWN}), frozenset({Side.LEFT})
        )


# =============================================================================
# Test Generation Scenarios
# =============================================================================


class TestGenerateScenarios:
    """Tests for generate with fixed randomness."""

    def test_first_choice_3x3(self) -> None:
        """Always taking the first candidate fills the 3x3 grid exactly."""
        field = generate(GridSize(3, 3), rng=FirstChoice())
        assert format_field(field) == FIRST_CHOICE_3X3
        assert field == parse_field(FIRST_CHOICE_3X3)
        assert len(field) <= 9

    def test_last_choice_terminates(self) -> None:
        for size in SIZES:
            field = generate(size, rng=LastChoice())
            assert check_field(field) == []
            assert len(field) <= size.cells

    def test_same_seed_same_field(self) -> None:
        """Two runs with the same random sequence are identical."""
        for size in SIZES:
            first = generate(size, rng=random.Random(99))
            second = generate(size, rng=random.Random(99))
            assert first == second
            assert format_field(first) == format_field(second)

    def test_seed_argument(self) -> None:
        size = GridSize(5, 5)
        assert generate(size, seed=3) == generate(size, seed=3)

    def test_rng_overrides_seed(self) -> None:
        size = GridSize(3, 3)
        assert generate(size, rng=FirstChoice(), seed=5) == parse_field(FIRST_CHOICE_3X3)

    def test_regeneration_does_not_share_state(self) -> None:
        """Each run returns a fresh Field."""
        size = GridSize(5, 5)
        first = generate(size, seed=1)
        snapshot = format_field(first)
        generate(size, seed=2)
        assert format_field(first) == snapshot

    def test_rectangular_grids(self) -> None:
        for size in (GridSize(3, 7), GridSize(8, 3), GridSize(4, 12)):
            for seed in range(50):
                field = generate(size, seed=seed)
                assert check_field(field) == [], format_field(field)

    def test_logs_run_summary(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level("INFO", logger="pathgen"):
            generate(GridSize(3, 3), rng=FirstChoice())
        assert "grid=3x3, segments=9, finish=(0, 2)" in caplog.text


# =============================================================================
# Test Generated Field Properties
# =============================================================================


@pytest.mark.parametrize("size", SIZES, ids=str)
class TestGeneratedProperties:
    """Properties every generated field must have, over many seeds."""

    SEEDS = range(150)

    def test_unique_coordinates(self, size: GridSize) -> None:
        for seed in self.SEEDS:
            field = generate(size, seed=seed)
            coords = [s.coordinate for s in field]
            assert len(coords) == len(set(coords))
            assert len(field) <= size.cells

    def test_neighbours_agree(self, size: GridSize) -> None:
        """Every adjacent pair agrees on the shared side, not just consecutive ones."""
        for seed in self.SEEDS:
            field = generate(size, seed=seed)
            for segment in field:
                for side, neighbour in field.neighbours(segment.coordinate):
                    assert segment.is_open(side) == neighbour.is_open(side.opposite), (
                        f"seed {seed}: {format_field(field)}"
                    )

    def test_single_start_and_finish(self, size: GridSize) -> None:
        for seed in self.SEEDS:
            field = generate(size, seed=seed)
            kinds = [s.kind for s in field]
            assert kinds.count(SegmentKind.START) == 1
            assert kinds.count(SegmentKind.FINISH) == 1
            assert field[0] == Segment(Coordinate(0, 0), SegmentKind.START)
            assert field[-1].kind is SegmentKind.FINISH

    def test_no_opening_leaves_grid(self, size: GridSize) -> None:
        for seed in self.SEEDS:
            field = generate(size, seed=seed)
            for segment in field:
                assert size.contains(segment.coordinate)
                for side in segment.openings:
                    assert not size.exits(segment.coordinate, side)

    def test_check_field_finds_nothing(self, size: GridSize) -> None:
        for seed in self.SEEDS:
            assert check_field(generate(size, seed=seed)) == []


class TestFinishDistribution:
    """Regression guard against a degenerate generator."""

    def test_finish_varies_on_10x10(self) -> None:
        size = GridSize(10, 10)
        finishes = {generate(size, seed=seed)[-1].coordinate for seed in range(500)}
        assert len(finishes) > 1

    def test_lengths_vary_on_10x10(self) -> None:
        size = GridSize(10, 10)
        lengths = {len(generate(size, seed=seed)) for seed in range(200)}
        assert len(lengths) > 1


# =============================================================================
# Test Consistency Checking
# =============================================================================


class TestCheckField:
    """Tests for check_field on hand-built fields."""

    def test_valid_field(self) -> None:
        assert check_field(parse_field(FIRST_CHOICE_3X3)) == []

    def test_mismatched_side(self) -> None:
        """A corner closed toward an open Start is reported."""
        field = parse_field("3x3 | 0,0:S 1,0:TL 1,1:F<D")
        kinds = {v.kind for v in check_field(field)}
        assert ViolationKind.MISMATCHED_SIDE in kinds
        assert ViolationKind.DISCONNECTED in kinds

    def test_open_toward_edge(self) -> None:
        field = parse_field("3x3 | 0,0:S 0,1:LR 1,1:F<L")
        violations = check_field(field)
        out_of_bounds = [v for v in violations if v.kind is ViolationKind.OUT_OF_BOUNDS]
        assert out_of_bounds[0].coordinate == Coordinate(0, 1)
        assert out_of_bounds[0].details == "open left"

    def test_missing_finish(self) -> None:
        field = parse_field("3x3 | 0,0:S 0,1:TB")
        kinds = [v.kind for v in check_field(field)]
        assert ViolationKind.BAD_FINISH in kinds

    def test_start_elsewhere(self) -> None:
        field = parse_field("3x3 | 1,0:S 1,1:F<D")
        violations = check_field(field)
        assert violations[0].kind is ViolationKind.BAD_START
        assert violations[0].details == "start not at (0, 0)"

    def test_second_start(self) -> None:
        field = parse_field("3x3 | 0,0:S 0,1:F<D 2,2:S")
        kinds = [v.kind for v in check_field(field)]
        assert ViolationKind.BAD_START in kinds
        assert ViolationKind.BAD_FINISH in kinds

    def test_empty_field(self) -> None:
        field = Field(GridSize(3, 3))
        kinds = [v.kind for v in check_field(field)]
        assert kinds == [ViolationKind.BAD_START, ViolationKind.BAD_FINISH]


# =============================================================================
# Test Configuration
# =============================================================================


class TestConfiguration:
    """Tests for presets and grid size parsing."""

    def test_presets(self) -> None:
        assert PRESETS["easy"] == GridSize(3, 3)
        assert PRESETS["medium"] == GridSize(5, 5)
        assert PRESETS["hard"] == GridSize(10, 10)

    def test_parse_preset_name(self) -> None:
        assert parse_grid_size("Hard") == GridSize(10, 10)

    def test_parse_explicit_size(self) -> None:
        assert parse_grid_size("4x6") == GridSize(4, 6)

    def test_parse_invalid(self) -> None:
        with pytest.raises(ValueError, match="Invalid grid size"):
            parse_grid_size("huge")

    @pytest.mark.parametrize("text", ["³x3", "3x+", "-x3", "3x3x3"])
    def test_parse_non_numeric(self, text: str) -> None:
        """Digit-like characters that int() rejects get the detailed message."""
        with pytest.raises(ValueError, match="Invalid grid size"):
            parse_grid_size(text)

    def test_parse_too_small(self) -> None:
        with pytest.raises(ValueError, match="Grid too small"):
            parse_grid_size("2x9")

    def test_generate_from_config(self) -> None:
        config = GeneratorConfig(GridSize(5, 5), seed=11)
        assert generate_from_config(config) == generate(GridSize(5, 5), seed=11)


# =============================================================================
# Test Scene Placement
# =============================================================================


class TestScenePlacement:
    """Tests for renderer-facing placement data."""

    def test_scene_position_is_cell_centre(self) -> None:
        assert scene_position(Coordinate(0, 0)) == (400, 400)
        assert scene_position(Coordinate(2, 1)) == (2000, 1200)
        assert scene_position(Coordinate(1, 1), tile_size=10) == (15, 15)

    def test_finish_node_uses_cap_rotation(self) -> None:
        segment = Segment(Coordinate(1, 2), SegmentKind.FINISH, arrival=Side.LEFT)
        node = SceneNode.for_segment(segment)
        assert node == SceneNode("(1, 2)_Finish", "finish", (1200, 2000), 180)

    def test_node_names_use_piece_identifiers(self) -> None:
        field = parse_field(FIRST_CHOICE_3X3)
        names = [n.name for n in field.scene_nodes()]
        assert names[0] == "(0, 0)_Start"
        assert names[1] == "(0, 1)_BR"
        assert names[5] == "(2, 1)_TB"
        assert names[-1] == "(0, 2)_Finish"

    def test_scene_nodes_follow_placement_order(self) -> None:
        field = parse_field(FIRST_CHOICE_3X3)
        nodes = field.scene_nodes()
        assert [n.piece for n in nodes] == [
            "start", "corner", "corner", "corner", "corner",
            "straight", "corner", "straight", "finish",
        ]
        assert nodes[1].rotation == 270
