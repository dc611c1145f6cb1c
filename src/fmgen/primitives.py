"""
Construction Primitives

Every structural change a model builder makes is announced as one of seven
tagged events. Subscribers (such as the product-set maintainer) react to the
tag; they never inspect the model itself.

ARCHITECTURAL RULE:
    Primitives are emitted in model order:
        - AddRoot first
        - A parent before any relation that hangs children below it
        - Cross-tree constraints after the tree is complete
    Each primitive is consumed exactly once.
"""

from abc import ABC
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from fmgen.model import Feature


class PrimitiveKind(Enum):
    """Tags of the closed set of construction primitives."""

    ROOT = "root"
    MANDATORY = "mandatory"
    OPTIONAL = "optional"
    ALTERNATIVE = "alternative"
    OR = "or"
    EXCLUDES = "excludes"
    REQUIRES = "requires"


class Primitive(ABC):
    """
    Base class for construction primitives.

    Structure only: the effect of a primitive on a product set belongs to
    the maintainer.
    """

    kind: PrimitiveKind


@dataclass(frozen=True)
class AddRoot(Primitive):
    root: Feature
    kind: PrimitiveKind = PrimitiveKind.ROOT


@dataclass(frozen=True)
class AddMandatory(Primitive):
    parent: Feature
    child: Feature
    kind: PrimitiveKind = PrimitiveKind.MANDATORY


@dataclass(frozen=True)
class AddOptional(Primitive):
    parent: Feature
    child: Feature
    kind: PrimitiveKind = PrimitiveKind.OPTIONAL


@dataclass(frozen=True)
class AddAlternativeGroup(Primitive):
    """
    Exactly one of the children is selected whenever the parent is.

    Example:
        Screen -> {Basic, Colour, HighResolution}
    """

    parent: Feature
    children: Tuple[Feature, ...]
    kind: PrimitiveKind = PrimitiveKind.ALTERNATIVE


@dataclass(frozen=True)
class AddOrGroup(Primitive):
    """At least one of the children is selected whenever the parent is."""

    parent: Feature
    children: Tuple[Feature, ...]
    kind: PrimitiveKind = PrimitiveKind.OR


@dataclass(frozen=True)
class AddExcludesConstraint(Primitive):
    origin: Feature
    destination: Feature
    kind: PrimitiveKind = PrimitiveKind.EXCLUDES


@dataclass(frozen=True)
class AddRequiresConstraint(Primitive):
    origin: Feature
    destination: Feature
    kind: PrimitiveKind = PrimitiveKind.REQUIRES
