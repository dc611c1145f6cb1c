"""
Tests for the model builders.

Tests verify that builders:
    - Emit AddRoot first and parents before children
    - Emit constraints after the tree is complete
    - Honour the requested number of features and constraints
    - Are deterministic for a given seed
    - Replay existing models primitive by primitive
"""

import pytest

from fmgen.builder import (
    RandomModelBuilder,
    ReplayModelBuilder,
    primitives_of,
)
from fmgen.characteristics import GenerationCharacteristics
from fmgen.errors import ConfigurationError, StructuralFailure
from fmgen.examples import build_example_phone_model
from fmgen.model import RelationKind
from fmgen.primitives import (
    PrimitiveKind,
    AddRoot,
    AddExcludesConstraint,
    AddRequiresConstraint,
)
from fmgen.serialization import model_to_dict


def record(builder):
    emitted = []
    builder.subscribe(emitted.append)
    return emitted


def introduced_features(primitive):
    if isinstance(primitive, AddRoot):
        return [primitive.root]
    if hasattr(primitive, "children"):
        return list(primitive.children)
    if hasattr(primitive, "child"):
        return [primitive.child]
    return []


class TestRandomModelBuilder:
    """Test random model generation."""

    def test_root_emitted_first(self):
        builder = RandomModelBuilder()
        emitted = record(builder)
        model = builder.build(GenerationCharacteristics(number_of_features=12, seed=3))
        assert isinstance(emitted[0], AddRoot)
        assert emitted[0].root == model.root

    def test_number_of_features(self):
        for n in (1, 2, 5, 17, 40):
            ch = GenerationCharacteristics(number_of_features=n, seed=n)
            model = RandomModelBuilder().build(ch)
            assert model.number_of_features == n

    def test_lone_root(self):
        builder = RandomModelBuilder()
        emitted = record(builder)
        model = builder.build(GenerationCharacteristics(number_of_features=1))
        assert model.relations == []
        assert [p.kind for p in emitted] == [PrimitiveKind.ROOT]

    def test_parents_emitted_before_children(self):
        builder = RandomModelBuilder()
        emitted = record(builder)
        builder.build(GenerationCharacteristics(number_of_features=30, seed=11))

        known = set()
        for primitive in emitted:
            parent = getattr(primitive, "parent", None)
            if parent is not None:
                assert parent in known
            known.update(introduced_features(primitive))
        assert len(known) == 30

    def test_constraints_after_tree(self):
        builder = RandomModelBuilder()
        emitted = record(builder)
        ch = GenerationCharacteristics(number_of_features=20, percentage_cross_tree_constraints=20, seed=5)
        model = builder.build(ch)

        kinds = [p.kind for p in emitted]
        constraint_kinds = {PrimitiveKind.REQUIRES, PrimitiveKind.EXCLUDES}
        first_constraint = min(i for i, k in enumerate(kinds) if k in constraint_kinds)
        assert all(k in constraint_kinds for k in kinds[first_constraint:])
        assert len(model.constraints) == ch.number_of_constraints == 4

    def test_constraints_avoid_ancestors(self):
        ch = GenerationCharacteristics(number_of_features=25, percentage_cross_tree_constraints=20, seed=8)
        model = RandomModelBuilder().build(ch)
        for c in model.constraints:
            assert c.origin != c.destination
            assert c.origin != model.root and c.destination != model.root
            assert not model.is_ancestor(c.origin, c.destination)
            assert not model.is_ancestor(c.destination, c.origin)

    def test_requires_share(self):
        ch = GenerationCharacteristics(number_of_features=20, percentage_cross_tree_constraints=20,
                                       percentage_requires=100, seed=2)
        builder = RandomModelBuilder()
        emitted = record(builder)
        builder.build(ch)
        constraints = [p for p in emitted if isinstance(p, (AddRequiresConstraint, AddExcludesConstraint))]
        assert constraints
        assert all(isinstance(p, AddRequiresConstraint) for p in constraints)

    def test_deterministic_for_seed(self):
        ch = GenerationCharacteristics(number_of_features=25, percentage_cross_tree_constraints=10, seed=42)
        first = model_to_dict(RandomModelBuilder().build(ch))
        second = model_to_dict(RandomModelBuilder().build(ch.clone()))
        assert first == second

    def test_negative_seed_differs_from_positive(self):
        ch = GenerationCharacteristics(number_of_features=40, percentage_cross_tree_constraints=10, seed=7)
        positive = model_to_dict(RandomModelBuilder().build(ch))
        negative = model_to_dict(RandomModelBuilder().build(ch.with_seed(-7)))
        assert negative["metadata"]["seed"] == "-7"
        assert (positive["relations"], positive["constraints"]) != (negative["relations"], negative["constraints"])

    def test_relation_mix_respected(self):
        ch = GenerationCharacteristics(number_of_features=30, percentage_mandatory=0,
                                       percentage_optional=100, percentage_alternative=0,
                                       percentage_or=0, seed=1)
        model = RandomModelBuilder().build(ch)
        assert all(r.kind == RelationKind.OPTIONAL for r in model.relations)

    def test_group_sizes(self):
        ch = GenerationCharacteristics(number_of_features=40, percentage_mandatory=0,
                                       percentage_optional=0, percentage_alternative=50,
                                       percentage_or=50, max_set_children=4, seed=9)
        model = RandomModelBuilder().build(ch)
        for r in model.relations:
            if r.kind.is_group:
                assert 2 <= len(r.children) <= 4
            else:
                # a group that did not fit the remaining budget
                assert r.kind == RelationKind.OPTIONAL

    def test_unplaceable_constraints(self):
        """A model too small for its constraints is a structural failure."""
        ch = GenerationCharacteristics(number_of_features=2, percentage_cross_tree_constraints=100)
        with pytest.raises(StructuralFailure):
            RandomModelBuilder().build(ch)

    def test_invalid_characteristics(self):
        ch = GenerationCharacteristics(percentage_or=30)
        with pytest.raises(ConfigurationError):
            RandomModelBuilder().build(ch)


class TestReplayModelBuilder:
    """Test replaying an existing model."""

    def test_replays_primitives_in_model_order(self):
        model = build_example_phone_model()
        builder = ReplayModelBuilder(model)
        emitted = record(builder)
        rebuilt = builder.build()
        assert emitted == list(primitives_of(model))
        assert model_to_dict(rebuilt) == model_to_dict(model)

    def test_ignores_seed(self):
        model = build_example_phone_model()
        builder = ReplayModelBuilder(model)
        first = model_to_dict(builder.build(GenerationCharacteristics(seed=1)))
        second = model_to_dict(builder.build(GenerationCharacteristics(seed=2)))
        assert first == second

    def test_rootless_model(self):
        from fmgen.model import FeatureModel
        with pytest.raises(StructuralFailure):
            ReplayModelBuilder(FeatureModel(name="Empty")).build()


class TestHooks:
    """Test hook registration."""

    def test_hooks_called_in_registration_order(self):
        calls = []
        builder = RandomModelBuilder()
        builder.subscribe(lambda p: calls.append(("first", p.kind)))
        builder.subscribe(lambda p: calls.append(("second", p.kind)))
        builder.build(GenerationCharacteristics(number_of_features=1))
        assert calls == [("first", PrimitiveKind.ROOT), ("second", PrimitiveKind.ROOT)]

    def test_unsubscribe(self):
        emitted = []
        builder = RandomModelBuilder()
        builder.subscribe(emitted.append)
        builder.unsubscribe(emitted.append)
        builder.build(GenerationCharacteristics(number_of_features=3))
        assert emitted == []
