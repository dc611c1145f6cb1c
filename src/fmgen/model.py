"""
Core Feature Model Objects

Defines the data structures of a hierarchical feature model:
    - Features (named identities)
    - Relations (parent -> children with a kind)
    - Cross-tree constraints (requires / excludes)
    - FeatureModel (root container)

ARCHITECTURAL RULE:
    These objects:
        - Know nothing about products or how they are computed
        - Are fully serializable
        - Represent structure, not behavior
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Dict

from fmgen.errors import ModelError


@dataclass(frozen=True)
class Feature:
    """
    An opaque feature identity.

    Products reference features, they never own them. Two features are the
    same feature when both name and identifier match.

    Properties:
        name: Human-readable feature name (e.g., "F3", "Camera")
        identifier: Numeric identifier, unique within a model
    """

    name: str
    identifier: int = 0

    def __str__(self) -> str:
        return self.name


class RelationKind(Enum):
    """
    Kinds of parent -> children relations.

    MANDATORY and OPTIONAL relate exactly one child.
    ALTERNATIVE (exactly one of) and OR (at least one of) relate a group.
    """

    MANDATORY = "mandatory"
    OPTIONAL = "optional"
    ALTERNATIVE = "alternative"
    OR = "or"

    @property
    def is_group(self) -> bool:
        return self in (RelationKind.ALTERNATIVE, RelationKind.OR)


class ConstraintKind(Enum):
    """Cross-tree constraint kinds."""

    REQUIRES = "requires"
    EXCLUDES = "excludes"


@dataclass
class Relation:
    """
    A directed relation from a parent feature to its children.

    Properties:
        parent: The parent feature
        kind: RelationKind
        children: Child features (one for mandatory/optional, a group otherwise)
    """

    parent: Feature
    kind: RelationKind
    children: List[Feature] = field(default_factory=list)


@dataclass
class CrossTreeConstraint:
    """
    A Boolean constraint between two features of different branches.

    Example:
        Camera REQUIRES HighResolution
        GPS EXCLUDES Basic
    """

    kind: ConstraintKind
    origin: Feature
    destination: Feature


@dataclass
class FeatureModel:
    """
    Root container for a feature model.

    Relations are kept in construction order: a relation is only added once
    its parent is part of the tree, so replaying them in order always visits
    parents before children.

    INVARIANTS:
        - Exactly one root, added before any relation
        - Every feature except the root is the child of exactly one relation
        - Constraints only reference features of the model
    """

    name: str
    root: Optional[Feature] = None
    features: List[Feature] = field(default_factory=list)
    relations: List[Relation] = field(default_factory=list)
    constraints: List[CrossTreeConstraint] = field(default_factory=list)
    metadata: Dict[str, str] = field(default_factory=dict)

    def add_root(self, root: Feature) -> Feature:
        if self.root is not None:
            raise ModelError(f"Model {self.name!r} already has root {self.root.name!r}")
        self.root = root
        self.features.append(root)
        return root

    def add_relation(self, parent: Feature, kind: RelationKind, children: List[Feature]) -> Relation:
        """
        Attach children to an existing parent.

        Raises:
            ModelError: If the parent is unknown, a child is already in the
                model, or the number of children does not fit the kind
        """
        if parent not in self.features:
            raise ModelError(f"Unknown parent feature: {parent.name}")
        if not children:
            raise ModelError(f"Relation under {parent.name} has no children")
        if not kind.is_group and len(children) != 1:
            raise ModelError(f"A {kind.value} relation relates exactly one child")
        if len(set(children)) != len(children):
            raise ModelError(f"Duplicate children under {parent.name}")
        for child in children:
            if child in self.features:
                raise ModelError(f"Feature {child.name} is already in the model")
        relation = Relation(parent=parent, kind=kind, children=list(children))
        self.relations.append(relation)
        self.features.extend(children)
        return relation

    def add_constraint(self, kind: ConstraintKind, origin: Feature, destination: Feature) -> CrossTreeConstraint:
        for feature in (origin, destination):
            if feature not in self.features:
                raise ModelError(f"Unknown feature in constraint: {feature.name}")
        if origin == destination:
            raise ModelError(f"Constraint on a single feature: {origin.name}")
        constraint = CrossTreeConstraint(kind=kind, origin=origin, destination=destination)
        self.constraints.append(constraint)
        return constraint

    @property
    def number_of_features(self) -> int:
        return len(self.features)

    def get_feature(self, name: str) -> Optional[Feature]:
        """
        Retrieve a feature by name.

        Returns:
            Feature object or None if not found
        """
        for feature in self.features:
            if feature.name == name:
                return feature
        return None

    def relation_of(self, feature: Feature) -> Optional[Relation]:
        """Return the relation in which the feature is a child (None for the root)."""
        for relation in self.relations:
            if feature in relation.children:
                return relation
        return None

    def get_parent(self, feature: Feature) -> Optional[Feature]:
        relation = self.relation_of(feature)
        return relation.parent if relation else None

    def children_of(self, feature: Feature) -> List[Feature]:
        children = []
        for relation in self.relations:
            if relation.parent == feature:
                children.extend(relation.children)
        return children

    def ancestors(self, feature: Feature) -> List[Feature]:
        """Ancestors from the direct parent up to the root."""
        result = []
        parent = self.get_parent(feature)
        while parent is not None:
            result.append(parent)
            parent = self.get_parent(parent)
        return result

    def is_ancestor(self, candidate: Feature, feature: Feature) -> bool:
        return candidate in self.ancestors(feature)

    def depth(self) -> int:
        """Length of the longest root-to-leaf path (0 for a lone root)."""
        if self.root is None:
            return 0
        return max((len(self.ancestors(f)) for f in self.features), default=0)
