"""
Model Analyzer: brute-force products and a diagnostic report.

This module provides read-only analysis of FeatureModel objects:
    - Product validity against feature-model semantics
    - Exhaustive product enumeration (small models only)
    - Variability (products relative to all feature combinations)
    - Core and dead features
    - Relation and constraint inventory

It does NOT modify the model. The exhaustive enumeration is the reference
the incrementally maintained products are checked against.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Set

from fmgen.model import Feature, FeatureModel, RelationKind, ConstraintKind
from fmgen.products import Product

LOG = logging.getLogger(__name__)

DEFAULT_MAX_FEATURES = 20


def is_valid_product(model: FeatureModel, features: Iterable[Feature]) -> bool:
    """
    Check a feature selection against the model semantics.

    A selection is a product when:
        - it contains the root and only features of the model
        - every selected child has its parent selected
        - a selected parent has its mandatory children selected
        - a selected parent has exactly one child of each alternative group
        - a selected parent has at least one child of each or group
        - requires and excludes constraints hold
    """
    selected = set(features)
    if model.root is None or model.root not in selected:
        return False
    if not selected.issubset(model.features):
        return False

    for relation in model.relations:
        chosen = sum(1 for c in relation.children if c in selected)
        if chosen and relation.parent not in selected:
            return False
        if relation.parent not in selected:
            continue
        if relation.kind == RelationKind.MANDATORY and chosen != 1:
            return False
        if relation.kind == RelationKind.ALTERNATIVE and chosen != 1:
            return False
        if relation.kind == RelationKind.OR and chosen < 1:
            return False

    for constraint in model.constraints:
        has_origin = constraint.origin in selected
        has_destination = constraint.destination in selected
        if constraint.kind == ConstraintKind.REQUIRES and has_origin and not has_destination:
            return False
        if constraint.kind == ConstraintKind.EXCLUDES and has_origin and has_destination:
            return False

    return True


def enumerate_products(model: FeatureModel,
                       max_features: int = DEFAULT_MAX_FEATURES) -> List[FrozenSet[Feature]]:
    """
    All products of a model, by checking every subset of non-root features.

    Raises:
        ValueError: If the model has no root or more than max_features features
    """
    if model.root is None:
        raise ValueError(f"Model {model.name!r} has no root")
    if model.number_of_features > max_features:
        raise ValueError(
            f"Brute-force enumeration limited to {max_features} features, "
            f"model has {model.number_of_features}"
        )

    others = [f for f in model.features if f != model.root]
    products = []
    for size in range(len(others) + 1):
        for subset in itertools.combinations(others, size):
            candidate = frozenset((model.root,) + subset)
            if is_valid_product(model, candidate):
                products.append(candidate)
    return products


def variability(number_of_products: int, number_of_features: int) -> float:
    """Products divided by the number of non-empty feature combinations."""
    if number_of_features < 1:
        return 0.0
    return number_of_products / (2 ** number_of_features - 1)


@dataclass
class ModelReport:
    """Analysis report for a feature model."""

    model_name: str
    total_features: int = 0
    total_relations: int = 0
    total_constraints: int = 0
    depth: int = 0

    relations_by_kind: Dict[str, int] = field(default_factory=dict)
    constraints_by_kind: Dict[str, int] = field(default_factory=dict)

    # Products
    number_of_products: int = 0
    variability: float = 0.0
    core_features: Set[str] = field(default_factory=set)   # In every product
    dead_features: Set[str] = field(default_factory=set)   # In no product

    warnings: List[str] = field(default_factory=list)

    @property
    def is_void(self) -> bool:
        return self.number_of_products == 0

    def add_warning(self, msg: str) -> None:
        """Add a warning to the report."""
        if msg not in self.warnings:
            self.warnings.append(msg)


def analyze_model(model: FeatureModel, products: Optional[Sequence[Product]] = None,
                  max_features: int = DEFAULT_MAX_FEATURES) -> ModelReport:
    """
    Analyze a FeatureModel.

    When products are supplied (e.g. from a generation run) they are used for
    the product metrics. If the model is small enough they are also compared
    with the brute-force enumeration, and any mismatch is flagged.

    Returns a ModelReport with metrics and warnings.
    """
    report = ModelReport(model_name=model.name)

    report.total_features = model.number_of_features
    report.total_relations = len(model.relations)
    report.total_constraints = len(model.constraints)
    report.depth = model.depth()

    for kind in RelationKind:
        report.relations_by_kind[kind.value] = sum(1 for r in model.relations if r.kind == kind)
    for kind in ConstraintKind:
        report.constraints_by_kind[kind.value] = sum(1 for c in model.constraints if c.kind == kind)

    small_enough = model.root is not None and model.number_of_features <= max_features
    expected = enumerate_products(model, max_features) if small_enough else None

    if products is not None:
        selections = [p.features for p in products]
        if expected is not None and set(selections) != set(expected):
            report.add_warning(
                f"Product mismatch: {len(selections)} products supplied, "
                f"{len(expected)} expected by exhaustive enumeration"
            )
    elif expected is not None:
        selections = expected
    else:
        selections = None
        report.add_warning(
            f"Product metrics skipped: {model.number_of_features} features exceed "
            f"the enumeration limit of {max_features}"
        )

    if selections is not None:
        report.number_of_products = len(selections)
        report.variability = variability(report.number_of_products, report.total_features)
        names = {f.name for f in model.features}
        if selections:
            report.core_features = {f.name for f in frozenset.intersection(*selections)}
            report.dead_features = names - {f.name for s in selections for f in s}
        else:
            report.dead_features = names

        if report.is_void:
            LOG.warning("Model %s has no products", model.name)
            report.add_warning("Void model: no valid products")
        elif report.dead_features:
            report.add_warning(f"Dead features: {', '.join(sorted(report.dead_features))}")

    return report
