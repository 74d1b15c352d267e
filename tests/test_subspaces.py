"""
Tests for the factorization, permutation and spatial split sub-spaces.
"""

import logging
from concurrent.futures import ThreadPoolExecutor

import pytest


SMALL_BOUNDS = {"R": 3, "S": 1, "P": 4, "Q": 1, "C": 2, "K": 1, "N": 1}


class TestIndexFactorizationSpace:
    """Tests for IndexFactorizationSpace."""

    def test_size_is_product_of_tables(self):
        """Test size = product of per-dimension table sizes."""
        from conv_mapspace.mapspace import IndexFactorizationSpace

        space = IndexFactorizationSpace()
        space.init(SMALL_BOUNDS, 2)
        # R: 2, P: 3, C: 2, everything else 1
        assert space.size() == 12

    def test_bijection(self):
        """Test that every index decodes to a distinct, exact factorization."""
        from conv_mapspace.mapspace import IndexFactorizationSpace
        from conv_mapspace.workload import Dimension

        space = IndexFactorizationSpace()
        space.init(SMALL_BOUNDS, 2)

        seen = set()
        for nest_id in range(space.size()):
            factors = space.get_factors(nest_id)
            for dim in Dimension:
                product = 1
                for level in range(2):
                    assert space.get_factor(nest_id, dim, level) == factors[dim][level]
                    product *= factors[dim][level]
                assert product == SMALL_BOUNDS[dim.name]
            seen.add(tuple(factors[dim] for dim in Dimension))
        assert len(seen) == space.size()

    def test_c64_three_levels(self):
        """Test C=64 over 3 levels with no pins."""
        from conv_mapspace.mapspace import IndexFactorizationSpace
        from conv_mapspace.workload import Dimension

        bounds = {d: 1 for d in Dimension}
        bounds[Dimension.C] = 64

        space = IndexFactorizationSpace()
        space.init(bounds, {d: 3 for d in Dimension})
        assert space.size() == 28

        triples = set()
        for nest_id in range(space.size()):
            triple = tuple(space.get_factor(nest_id, "C", level) for level in range(3))
            assert triple[0] * triple[1] * triple[2] == 64
            triples.add(triple)
        assert len(triples) == 28

    def test_prefactors(self):
        """Test that pinned factors are honoured per dimension."""
        from conv_mapspace.mapspace import IndexFactorizationSpace
        from conv_mapspace.workload import Dimension

        bounds = [3, 3, 8, 8, 16, 16, 1]
        space = IndexFactorizationSpace()
        space.init(bounds, 3, prefactors={Dimension.R: {0: 3}, "S": {1: 3}, "C": {2: 4}})

        for nest_id in range(0, space.size(), 7):
            assert space.get_factor(nest_id, Dimension.R, 0) == 3
            assert space.get_factor(nest_id, Dimension.S, 1) == 3
            assert space.get_factor(nest_id, Dimension.C, 2) == 4
        assert space.dimension_factors[Dimension.R].size() == 1
        assert space.dimension_factors[Dimension.C].size() == 3

    def test_bad_prefactor_names_dimension(self):
        """Test that configuration errors mention the dimension."""
        from conv_mapspace.errors import ConfigurationError
        from conv_mapspace.mapspace import IndexFactorizationSpace

        space = IndexFactorizationSpace()
        with pytest.raises(ConfigurationError, match="Dimension K"):
            space.init(SMALL_BOUNDS, 2, prefactors={"K": {0: 2}})

    def test_idempotent_init(self):
        """Test that repeating init() gives identical decodes."""
        from conv_mapspace.mapspace import IndexFactorizationSpace

        space = IndexFactorizationSpace()
        space.init(SMALL_BOUNDS, 2)
        first = [space.get_factors(i) for i in range(space.size())]

        space.init(SMALL_BOUNDS, 2)
        second = [space.get_factors(i) for i in range(space.size())]
        assert first == second

    def test_out_of_range(self):
        """Test range checking."""
        from conv_mapspace.mapspace import IndexFactorizationSpace

        space = IndexFactorizationSpace()
        space.init(SMALL_BOUNDS, 2)
        with pytest.raises(IndexError):
            space.get_factor(space.size(), "R", 0)

    def test_missing_dimension(self):
        """Test that every dimension needs a bound."""
        from conv_mapspace.errors import ConfigurationError
        from conv_mapspace.mapspace import IndexFactorizationSpace

        space = IndexFactorizationSpace()
        with pytest.raises(ConfigurationError):
            space.init({"R": 3}, 2)


class TestPermutationSpace:
    """Tests for PermutationSpace."""

    def test_two_free_dimensions(self):
        """Test suffix [C, K]: index 0 -> C,K and index 1 -> K,C."""
        from conv_mapspace.mapspace import PermutationSpace
        from conv_mapspace.workload import Dimension as D

        space = PermutationSpace()
        space.init(1)
        space.init_level(0, [D.R, D.S, D.P, D.Q, D.N])
        assert space.size() == 2

        assert space.get_patterns(0) == [[D.R, D.S, D.P, D.Q, D.N, D.C, D.K]]
        assert space.get_patterns(1) == [[D.R, D.S, D.P, D.Q, D.N, D.K, D.C]]

    def test_logs_level_sizes(self, caplog):
        """Test that each initialized level reports its option count."""
        from conv_mapspace.mapspace import PermutationSpace

        caplog.set_level(logging.INFO, logger="conv_mapspace.mapspace.subspaces")
        space = PermutationSpace()
        space.init(2)
        space.init_level(0, ["R", "S", "P", "Q", "N"])
        space.init_level_canonical(1)

        assert "Permutation options at level 0 = 2" in caplog.text
        assert "Permutation options at level 1 = 1" in caplog.text

    def test_fully_free_level(self):
        """Test that one fully free level has 7! orderings."""
        from conv_mapspace.mapspace import PermutationSpace

        space = PermutationSpace()
        space.init(1)
        space.init_level(0, [])
        assert space.size() == 5040

        seen = {tuple(space.get_patterns(i)[0]) for i in range(space.size())}
        assert len(seen) == 5040

    def test_canonical_level_has_no_entropy(self):
        """Test init_level_canonical()."""
        from conv_mapspace.mapspace import PermutationSpace
        from conv_mapspace.workload import CANONICAL_ORDER

        space = PermutationSpace()
        space.init(2)
        space.init_level_canonical(0)
        space.init_level(1, [])
        assert space.size() == 5040
        assert space.level_size(0) == 1
        for i in (0, 17, 5039):
            assert space.get_patterns(i)[0] == list(CANONICAL_ORDER)

    def test_levels_consume_low_digits_first(self):
        """Test mixed-radix order across levels."""
        from conv_mapspace.mapspace import PermutationSpace
        from conv_mapspace.workload import Dimension as D

        prefix = [D.R, D.S, D.P, D.Q, D.N]
        space = PermutationSpace()
        space.init(2)
        space.init_level(0, prefix)       # suffix C, K -> 2 options
        space.init_level(1, prefix[:4])   # suffix C, K, N -> 6 options
        assert space.size() == 12

        patterns = space.get_patterns(1)
        assert patterns[0][-2:] == [D.K, D.C]
        assert patterns[1][-3:] == [D.C, D.K, D.N]

        patterns = space.get_patterns(2)
        assert patterns[0][-2:] == [D.C, D.K]
        assert patterns[1][-3:] == [D.K, D.C, D.N]

    def test_pruned_dimensions_lead_prefix(self):
        """Test that pruned dimensions come first, then new user dimensions."""
        from conv_mapspace.mapspace import PermutationSpace
        from conv_mapspace.workload import Dimension as D

        space = PermutationSpace()
        space.init(1)
        space.init_level(0, user_prefix=[D.C, D.N], pruned_dimensions=[D.N, D.R])
        baked_prefix, suffix = space.patterns[0]
        assert baked_prefix == (D.N, D.R, D.C)
        assert suffix == (D.S, D.P, D.Q, D.K)
        assert space.size() == 24

    def test_prefix_never_moves(self):
        """Test that baked dimensions keep their positions for every index."""
        from conv_mapspace.mapspace import PermutationSpace

        space = PermutationSpace()
        space.init(1)
        space.init_level(0, ["K", "C"], pruned_dimensions=["N"])

        seen = set()
        for i in range(space.size()):
            pattern = space.get_patterns(i)[0]
            assert [d.name for d in pattern[:3]] == ["N", "K", "C"]
            assert sorted(pattern) == sorted(set(pattern))
            assert len(pattern) == 7
            seen.add(tuple(pattern))
        assert len(seen) == space.size() == 24

    def test_level_out_of_range(self):
        """Test that init_level() checks the level index."""
        from conv_mapspace.errors import ConfigurationError
        from conv_mapspace.mapspace import PermutationSpace

        space = PermutationSpace()
        space.init(2)
        with pytest.raises(ConfigurationError):
            space.init_level(2, [])
        with pytest.raises(ConfigurationError):
            space.init_level_canonical(-1)

    def test_duplicate_prefix(self):
        """Test that a dimension cannot appear twice in the user prefix."""
        from conv_mapspace.errors import ConfigurationError
        from conv_mapspace.mapspace import PermutationSpace

        space = PermutationSpace()
        space.init(1)
        with pytest.raises(ConfigurationError):
            space.init_level(0, ["C", "C"])

    def test_uninitialized_level(self):
        """Test that every level must be initialized before decoding."""
        from conv_mapspace.errors import ConfigurationError
        from conv_mapspace.mapspace import PermutationSpace

        space = PermutationSpace()
        space.init(2)
        space.init_level(0, [])
        with pytest.raises(ConfigurationError):
            space.size()

    def test_init_resets(self):
        """Test that init() forgets earlier levels."""
        from conv_mapspace.mapspace import PermutationSpace

        space = PermutationSpace()
        space.init(1)
        space.init_level(0, [])
        space.init(1)
        space.init_level_canonical(0)
        assert space.size() == 1


class TestSpatialSplitSpace:
    """Tests for SpatialSplitSpace."""

    def test_split_range(self):
        """Test init_level(1, unit_factors=2) over 7 dimensions."""
        from conv_mapspace.mapspace import SpatialSplitSpace

        space = SpatialSplitSpace()
        space.init(3)
        space.init_level(1, unit_factors=2)
        assert space.size() == 6
        assert [space.get_splits(i) for i in range(6)] == [{1: v} for v in range(2, 8)]

    def test_logs_level_sizes(self, caplog):
        """Test that free and fixed spatial levels are both reported."""
        from conv_mapspace.mapspace import SpatialSplitSpace

        caplog.set_level(logging.INFO, logger="conv_mapspace.mapspace.subspaces")
        space = SpatialSplitSpace()
        space.init(3)
        space.init_level(1, unit_factors=2)
        space.init_level_user_specified(2, 4)

        assert "Spatial split options at level 1 = 6" in caplog.text
        assert "Spatial split at level 2 fixed to 4" in caplog.text

    def test_user_specified(self):
        """Test that a fixed level has no entropy."""
        from conv_mapspace.mapspace import SpatialSplitSpace

        space = SpatialSplitSpace()
        space.init(2)
        space.init_level_user_specified(0, 3)
        assert space.size() == 1
        assert space.get_splits(0) == {0: 3}

    def test_mixed_levels(self):
        """Test free and fixed levels together; temporal levels are omitted."""
        from conv_mapspace.mapspace import SpatialSplitSpace

        space = SpatialSplitSpace()
        space.init(5)
        space.init_level(1)
        space.init_level_user_specified(2, 5)
        space.init_level(4, unit_factors=4)
        assert space.size() == 8 * 4
        assert space.spatial_levels == [1, 2, 4]

        # 9 -> level 1 digit 1, level 4 digit 1
        assert space.get_splits(9) == {1: 1, 2: 5, 4: 5}

        seen = {tuple(sorted(space.get_splits(i).items())) for i in range(space.size())}
        assert len(seen) == space.size()

    def test_no_spatial_levels(self):
        """Test an all-temporal hierarchy."""
        from conv_mapspace.mapspace import SpatialSplitSpace

        space = SpatialSplitSpace()
        space.init(3)
        assert space.size() == 1
        assert space.get_splits(0) == {}

    def test_invalid_levels(self):
        """Test configuration errors."""
        from conv_mapspace.errors import ConfigurationError
        from conv_mapspace.mapspace import SpatialSplitSpace

        space = SpatialSplitSpace()
        space.init(2)
        with pytest.raises(ConfigurationError):
            space.init_level(2)
        with pytest.raises(ConfigurationError):
            space.init_level_user_specified(5, 1)
        with pytest.raises(ConfigurationError):
            space.init_level(0, unit_factors=8)
        with pytest.raises(ConfigurationError):
            space.init_level_user_specified(0, 8)

    def test_out_of_range(self):
        """Test range checking."""
        from conv_mapspace.mapspace import SpatialSplitSpace

        space = SpatialSplitSpace()
        space.init(2)
        space.init_level(0)
        with pytest.raises(IndexError):
            space.get_splits(8)


class TestProductSpace:
    """Tests for composing sub-spaces."""

    def test_protocol(self):
        """Test that every sub-space is an IndexedSpace."""
        from conv_mapspace.mapspace import (
            IndexedSpace,
            IndexFactorizationSpace,
            PermutationSpace,
            SpatialSplitSpace,
        )
        from conv_mapspace.numeric import MixedRadixCounter

        for space in (IndexFactorizationSpace(), PermutationSpace(), SpatialSplitSpace(), MixedRadixCounter([2])):
            assert isinstance(space, IndexedSpace)

    def test_product_split(self):
        """Test that the first space takes the lowest digits."""
        from conv_mapspace.mapspace import PermutationSpace, ProductSpace, SpatialSplitSpace

        permutations = PermutationSpace()
        permutations.init(1)
        permutations.init_level(0, ["R", "S", "P", "Q", "N"])

        splits = SpatialSplitSpace()
        splits.init(1)
        splits.init_level(0, unit_factors=5)

        product = ProductSpace([permutations, splits])
        assert product.size() == 2 * 3
        assert product.sizes == (2, 3)
        assert product.split(5) == [1, 2]
        assert product.encode([1, 2]) == 5

        pattern, split = product.decode(5)
        assert [d.name for d in pattern[0][-2:]] == ["K", "C"]
        assert split == {0: 7}


class TestConcurrentDecode:
    """Decoding from many threads gives the same results as serial decoding."""

    def test_threads(self):
        from conv_mapspace.mapspace import PermutationSpace

        space = PermutationSpace()
        space.init(2)
        space.init_level(0, [])
        space.init_level(1, ["N"])

        ids = list(range(0, space.size(), 9973))
        serial = [space.get_patterns(i) for i in ids]
        with ThreadPoolExecutor(max_workers=8) as pool:
            parallel = list(pool.map(space.get_patterns, ids))
        assert parallel == serial


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
