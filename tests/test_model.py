"""
Tests for the core feature model objects.

These tests verify:
    - Basic model creation
    - Relationships between features
    - Invariants and constraints
    - Retrieval methods
"""

import pytest

from fmgen.errors import ModelError
from fmgen.model import (
    Feature,
    FeatureModel,
    RelationKind,
    ConstraintKind,
)


def tree():
    """Root -> A (optional) -> {B, C} (or)"""
    m = FeatureModel(name="Tree")
    root, a, b, c = Feature("Root", 0), Feature("A", 1), Feature("B", 2), Feature("C", 3)
    m.add_root(root)
    m.add_relation(root, RelationKind.OPTIONAL, [a])
    m.add_relation(a, RelationKind.OR, [b, c])
    return m


class TestFeature:
    """Test Feature identities."""

    def test_identity(self):
        assert Feature("A", 1) == Feature("A", 1)
        assert Feature("A", 1) != Feature("A", 2)

    def test_hashable(self):
        assert len({Feature("A", 1), Feature("A", 1), Feature("B", 2)}) == 2

    def test_str(self):
        assert str(Feature("Camera", 4)) == "Camera"


class TestRelationKind:
    def test_groups(self):
        assert RelationKind.ALTERNATIVE.is_group
        assert RelationKind.OR.is_group
        assert not RelationKind.MANDATORY.is_group
        assert not RelationKind.OPTIONAL.is_group


class TestFeatureModel:
    """Test FeatureModel construction and retrieval."""

    def test_empty_model(self):
        m = FeatureModel(name="Empty")
        assert m.root is None
        assert m.number_of_features == 0
        assert m.depth() == 0

    def test_build_tree(self):
        m = tree()
        assert m.number_of_features == 4
        assert [f.name for f in m.features] == ["Root", "A", "B", "C"]
        assert len(m.relations) == 2

    def test_get_feature(self):
        m = tree()
        assert m.get_feature("B") == Feature("B", 2)
        assert m.get_feature("Z") is None

    def test_parent_and_children(self):
        m = tree()
        b = m.get_feature("B")
        assert m.get_parent(b).name == "A"
        assert m.get_parent(m.root) is None
        assert [f.name for f in m.children_of(m.get_feature("A"))] == ["B", "C"]

    def test_ancestors(self):
        m = tree()
        c = m.get_feature("C")
        assert [f.name for f in m.ancestors(c)] == ["A", "Root"]
        assert m.is_ancestor(m.root, c)
        assert not m.is_ancestor(c, m.root)
        assert m.depth() == 2

    def test_second_root_rejected(self):
        m = tree()
        with pytest.raises(ModelError):
            m.add_root(Feature("Other", 9))

    def test_unknown_parent_rejected(self):
        m = tree()
        with pytest.raises(ModelError):
            m.add_relation(Feature("Ghost", 9), RelationKind.OPTIONAL, [Feature("X", 10)])

    def test_reused_child_rejected(self):
        m = tree()
        with pytest.raises(ModelError):
            m.add_relation(m.root, RelationKind.OPTIONAL, [m.get_feature("B")])

    def test_single_child_kinds(self):
        m = tree()
        with pytest.raises(ModelError):
            m.add_relation(m.root, RelationKind.MANDATORY, [Feature("X", 10), Feature("Y", 11)])

    def test_empty_group_rejected(self):
        m = tree()
        with pytest.raises(ModelError):
            m.add_relation(m.root, RelationKind.OR, [])

    def test_constraints(self):
        m = tree()
        constraint = m.add_constraint(ConstraintKind.REQUIRES, m.get_feature("B"), m.get_feature("C"))
        assert constraint.kind == ConstraintKind.REQUIRES
        assert m.constraints == [constraint]

    def test_invalid_constraints(self):
        m = tree()
        with pytest.raises(ModelError):
            m.add_constraint(ConstraintKind.EXCLUDES, m.get_feature("B"), Feature("Ghost", 9))
        with pytest.raises(ModelError):
            m.add_constraint(ConstraintKind.EXCLUDES, m.get_feature("B"), m.get_feature("B"))
