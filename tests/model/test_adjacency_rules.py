"""Tests for the adjacency rule table and the per-cell enabler counts."""

from __future__ import annotations

import numpy as np
import pytest

from tests.helpers import TILE_A, TILE_B, TILE_C, make_gradient_rules
from tilecollapse.enums import Direction
from tilecollapse.exceptions import UnregisteredTileError, WFCContradiction
from tilecollapse.model.adjacency_rules import AdjacencyRules, EnablerDict


class TestAdjacencyRules:
    """Tests for AdjacencyRules."""

    def test_allow_adds_the_opposite_relation(self) -> None:
        """Allowing b to the right of a also allows a to the left of b."""
        rules = AdjacencyRules()
        rules.allow(0, 1, Direction.RIGHT)

        assert rules.is_allowed(0, 1, Direction.RIGHT)
        assert rules.is_allowed(1, 0, Direction.LEFT)
        assert not rules.is_allowed(1, 0, Direction.RIGHT)
        assert not rules.is_allowed(0, 1, Direction.UP)

    def test_allow_is_idempotent(self) -> None:
        """Repeating an 'allow' call doesn't change the enabler counts."""
        rules = AdjacencyRules()
        rules.allow(0, 1, Direction.DOWN)
        rules.allow(0, 1, Direction.DOWN)

        assert rules.enabled_by_count(0) == [0, 0, 0, 1]
        assert rules.enabled_by_count(1) == [0, 0, 1, 0]

    def test_enabled_by_returns_the_allowed_tiles(self) -> None:
        """'enabled_by' lists every tile allowed next to the given tile in that direction."""
        rules = make_gradient_rules()

        assert set(rules.enabled_by(TILE_A, Direction.UP)) == {TILE_A, TILE_B}
        assert set(rules.enabled_by(TILE_B, Direction.LEFT)) == {TILE_A, TILE_B, TILE_C}
        assert set(rules.enabled_by(TILE_C, Direction.DOWN)) == {TILE_B, TILE_C}

    def test_enabled_by_raises_for_unregistered_tiles(self) -> None:
        """Looking up a tile that was never registered raises a LookupError."""
        rules = make_gradient_rules()

        with pytest.raises(UnregisteredTileError):
            rules.enabled_by(7, Direction.LEFT)
        with pytest.raises(LookupError):
            rules.enabled_by(7, Direction.LEFT)

    def test_registered_tile_without_neighbors(self) -> None:
        """A registered tile that was never allowed next to anything has empty sets."""
        rules = AdjacencyRules()
        rules.register(0)

        assert len(rules) == 1
        assert rules.enabled_by_count(0) == [0, 0, 0, 0]

    def test_tile_ids_are_sorted(self) -> None:
        """'tile_ids' returns the registered IDs in ascending order."""
        rules = AdjacencyRules()
        rules.allow(3, 1, Direction.LEFT)
        rules.register(2)

        assert rules.tile_ids() == [1, 2, 3]


class TestEnablerDict:
    """Tests for EnablerDict."""

    def test_initial_counts_match_the_rules(self) -> None:
        """Every tile starts out possible, with one enabler per compatible tile and direction."""
        domain = EnablerDict.from_adjacency_rules(make_gradient_rules())

        assert len(domain) == 3
        assert domain.tile_count == 3
        assert domain.allowed_tile_ids() == [TILE_A, TILE_B, TILE_C]
        assert domain.enabler_counts(TILE_A) == [2, 2, 2, 2]
        assert domain.enabler_counts(TILE_B) == [3, 3, 3, 3]
        assert domain.enabler_counts(TILE_C) == [2, 2, 2, 2]

    def test_remove_single_decrements_counts(self) -> None:
        """Removing an enabler only decrements the side facing the neighbor."""
        rules = make_gradient_rules()
        domain = EnablerDict.from_adjacency_rules(rules)

        # Tile A was removed from the left neighbor, so 'direction' points to the right.
        removed = domain.remove_single(TILE_A, Direction.RIGHT, rules)

        assert removed is None
        assert domain.enabler_counts(TILE_A) == [1, 2, 2, 2]
        assert domain.enabler_counts(TILE_B) == [2, 3, 3, 3]
        assert domain.enabler_counts(TILE_C) == [2, 2, 2, 2]

    def test_remove_single_removes_tiles_without_enablers(self) -> None:
        """A tile whose last enabler on one side disappears becomes impossible."""
        rules = make_gradient_rules()
        domain = EnablerDict.from_adjacency_rules(rules)

        domain.remove_single(TILE_A, Direction.RIGHT, rules)
        removed = domain.remove_single(TILE_B, Direction.RIGHT, rules)

        assert removed == [TILE_A]
        assert domain.allowed_tile_ids() == [TILE_B, TILE_C]
        assert domain.enabler_counts(TILE_A) is None
        assert not domain.is_allowed(TILE_A)
        assert len(domain) == 2

    def test_remove_single_skips_impossible_tiles(self) -> None:
        """Counts of tiles that are already impossible are no longer updated."""
        rules = make_gradient_rules()
        domain = EnablerDict.from_adjacency_rules(rules)
        domain.remove_all_but(TILE_C)

        removed = domain.remove_single(TILE_A, Direction.UP, rules)

        assert removed is None
        assert domain.allowed_tile_ids() == [TILE_C]

    def test_remove_single_raises_when_a_count_is_already_zero(self) -> None:
        """Decrementing a zero count means the state is inconsistent."""
        rules = AdjacencyRules()
        rules.allow(0, 1, Direction.RIGHT)
        domain = EnablerDict(np.zeros((2, len(Direction)), dtype=np.int_))

        with pytest.raises(WFCContradiction):
            domain.remove_single(0, Direction.RIGHT, rules)

    def test_remove_all_but_returns_the_removed_tiles(self) -> None:
        """Collapsing a domain removes every other possible tile."""
        domain = EnablerDict.from_adjacency_rules(make_gradient_rules())

        removed = domain.remove_all_but(TILE_B)

        assert removed == [TILE_A, TILE_C]
        assert domain.allowed_tile_ids() == [TILE_B]
        assert len(domain) == 1

    def test_remove_all_but_raises_for_an_impossible_survivor(self) -> None:
        """A tile that is no longer possible can't be the survivor."""
        domain = EnablerDict.from_adjacency_rules(make_gradient_rules())
        domain.remove_all_but(TILE_A)

        with pytest.raises(WFCContradiction):
            domain.remove_all_but(TILE_C)

    def test_copies_are_independent(self) -> None:
        """Changing a copy leaves the original untouched."""
        rules = make_gradient_rules()
        original = EnablerDict.from_adjacency_rules(rules)
        clone = original.copy()

        clone.remove_single(TILE_A, Direction.DOWN, rules)
        clone.remove_all_but(TILE_B)

        assert original.allowed_tile_ids() == [TILE_A, TILE_B, TILE_C]
        assert original.enabler_counts(TILE_B) == [3, 3, 3, 3]

    def test_filter_allowed_enumerate(self) -> None:
        """Per-tile sequences are filtered down to the possible tiles."""
        domain = EnablerDict.from_adjacency_rules(make_gradient_rules())
        domain.remove_all_but(TILE_C)

        assert domain.filter_allowed_enumerate(["a", "b", "c"]) == [(TILE_C, "c")]
