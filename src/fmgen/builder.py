"""
Model builders.

A builder constructs a FeatureModel and announces every structural change to
its subscribers as a construction primitive, synchronously and in model
order, before build() returns.

Two builders are provided:
    - RandomModelBuilder: grows a random tree from GenerationCharacteristics
    - ReplayModelBuilder: re-emits the construction of an existing model
"""

import logging
import random
from abc import ABC, abstractmethod
from collections import deque
from typing import Callable, Iterator, List, Optional, Set, Tuple

from fmgen.characteristics import GenerationCharacteristics
from fmgen.errors import StructuralFailure
from fmgen.model import (
    Feature,
    FeatureModel,
    Relation,
    RelationKind,
    ConstraintKind,
    CrossTreeConstraint,
)
from fmgen.primitives import (
    Primitive,
    AddRoot,
    AddMandatory,
    AddOptional,
    AddAlternativeGroup,
    AddOrGroup,
    AddExcludesConstraint,
    AddRequiresConstraint,
)

LOG = logging.getLogger(__name__)

Hook = Callable[[Primitive], None]

# Draws per constraint before the model shape is declared infeasible
MAX_CONSTRAINT_DRAWS = 100

# Integer seeds are reduced modulo 2**64 so negative seeds stay distinct
SEED_MODULUS = 2 ** 64


def relation_primitive(relation: Relation) -> Primitive:
    """Primitive announcing a relation."""
    parent = relation.parent
    children = tuple(relation.children)
    if relation.kind == RelationKind.MANDATORY:
        return AddMandatory(parent=parent, child=children[0])
    if relation.kind == RelationKind.OPTIONAL:
        return AddOptional(parent=parent, child=children[0])
    if relation.kind == RelationKind.ALTERNATIVE:
        return AddAlternativeGroup(parent=parent, children=children)
    if relation.kind == RelationKind.OR:
        return AddOrGroup(parent=parent, children=children)
    raise TypeError(f"Unsupported relation kind: {relation.kind}")


def constraint_primitive(constraint: CrossTreeConstraint) -> Primitive:
    """Primitive announcing a cross-tree constraint."""
    if constraint.kind == ConstraintKind.REQUIRES:
        return AddRequiresConstraint(origin=constraint.origin, destination=constraint.destination)
    if constraint.kind == ConstraintKind.EXCLUDES:
        return AddExcludesConstraint(origin=constraint.origin, destination=constraint.destination)
    raise TypeError(f"Unsupported constraint kind: {constraint.kind}")


def primitives_of(model: FeatureModel) -> Iterator[Primitive]:
    """
    Construction primitives of an existing model, in model order.

    Root first, then relations in insertion order (parents always precede
    their children), then cross-tree constraints.
    """
    if model.root is None:
        return
    yield AddRoot(root=model.root)
    for relation in model.relations:
        yield relation_primitive(relation)
    for constraint in model.constraints:
        yield constraint_primitive(constraint)


class ModelBuilder(ABC):
    """
    Base class for builders that notify hooks of each construction primitive.
    """

    def __init__(self):
        self._hooks: List[Hook] = []

    def subscribe(self, hook: Hook) -> None:
        if hook not in self._hooks:
            self._hooks.append(hook)

    def unsubscribe(self, hook: Hook) -> None:
        if hook in self._hooks:
            self._hooks.remove(hook)

    def _emit(self, primitive: Primitive) -> None:
        for hook in self._hooks:
            hook(primitive)

    def _add_root(self, model: FeatureModel, root: Feature) -> None:
        model.add_root(root)
        self._emit(AddRoot(root=root))

    def _add_relation(self, model: FeatureModel, parent: Feature, kind: RelationKind,
                      children: List[Feature]) -> None:
        relation = model.add_relation(parent, kind, children)
        self._emit(relation_primitive(relation))

    def _add_constraint(self, model: FeatureModel, kind: ConstraintKind,
                        origin: Feature, destination: Feature) -> None:
        constraint = model.add_constraint(kind, origin, destination)
        self._emit(constraint_primitive(constraint))

    @abstractmethod
    def build(self, characteristics: Optional[GenerationCharacteristics] = None) -> FeatureModel:
        """
        Build a complete model, emitting primitives along the way.

        Raises:
            StructuralFailure: If the requested shape cannot be realized
        """


class RandomModelBuilder(ModelBuilder):
    """
    Grows a random feature tree breadth-first.

    Every parent taken from the queue receives between 1 and
    max_branching_factor relations. Relation kinds are drawn with the
    percentage weights; groups get 2..max_set_children children. A group
    that no longer fits in the remaining feature budget becomes optional.
    Cross-tree constraints are added once the tree is complete.

    The same characteristics (seed included) always yield the same model.
    Seeds are folded into the unsigned 64-bit range before seeding, since
    random.Random ignores the sign of an integer seed.
    """

    def build(self, characteristics: Optional[GenerationCharacteristics] = None) -> FeatureModel:
        ch = characteristics or GenerationCharacteristics()
        ch.validate()
        rng = random.Random(ch.seed % SEED_MODULUS)

        model = FeatureModel(name=ch.model_name)
        model.metadata["seed"] = str(ch.seed)
        self._add_root(model, Feature(name="Root", identifier=0))

        self._grow_tree(model, ch, rng)
        self._add_constraints(model, ch, rng)

        LOG.debug(
            "Built model %s: %d features, %d relations, %d constraints (seed %d)",
            model.name, model.number_of_features, len(model.relations),
            len(model.constraints), ch.seed,
        )
        return model

    def _grow_tree(self, model: FeatureModel, ch: GenerationCharacteristics,
                   rng: random.Random) -> None:
        kinds = [RelationKind.MANDATORY, RelationKind.OPTIONAL,
                 RelationKind.ALTERNATIVE, RelationKind.OR]
        weights = [ch.percentage_mandatory, ch.percentage_optional,
                   ch.percentage_alternative, ch.percentage_or]

        remaining = ch.number_of_features - 1
        next_id = 1
        queue = deque([model.root])

        while remaining > 0:
            parent = queue.popleft()
            for _ in range(rng.randint(1, ch.max_branching_factor)):
                if remaining == 0:
                    break
                kind = rng.choices(kinds, weights=weights)[0]
                size = 1
                if kind.is_group:
                    if remaining < 2:
                        kind = RelationKind.OPTIONAL
                    else:
                        size = rng.randint(2, min(ch.max_set_children, remaining))

                children = [Feature(name=f"F{next_id + i}", identifier=next_id + i)
                            for i in range(size)]
                next_id += size
                remaining -= size

                self._add_relation(model, parent, kind, children)
                queue.extend(children)

    def _add_constraints(self, model: FeatureModel, ch: GenerationCharacteristics,
                         rng: random.Random) -> None:
        wanted = ch.number_of_constraints
        if wanted == 0:
            return
        candidates = model.features[1:]
        if len(candidates) < 2:
            raise StructuralFailure(
                f"Cannot place {wanted} constraints in a model with {len(candidates)} non-root features"
            )

        constrained: Set[Tuple[Feature, Feature]] = set()
        for _ in range(wanted):
            for _ in range(MAX_CONSTRAINT_DRAWS):
                origin, destination = rng.sample(candidates, 2)
                if (origin, destination) in constrained or (destination, origin) in constrained:
                    continue
                if model.is_ancestor(origin, destination) or model.is_ancestor(destination, origin):
                    continue
                break
            else:
                raise StructuralFailure(
                    f"No valid feature pair left for constraint {len(constrained) + 1} of {wanted}"
                )

            if rng.randrange(100) < ch.percentage_requires:
                kind = ConstraintKind.REQUIRES
            else:
                kind = ConstraintKind.EXCLUDES
            self._add_constraint(model, kind, origin, destination)
            constrained.add((origin, destination))


class ReplayModelBuilder(ModelBuilder):
    """
    Rebuilds an existing model, emitting its construction primitives.

    Deterministic: the characteristics (and their seed) are ignored, so every
    attempt reproduces exactly the same shape.
    """

    def __init__(self, model: FeatureModel):
        super().__init__()
        self.model = model

    def build(self, characteristics: Optional[GenerationCharacteristics] = None) -> FeatureModel:
        source = self.model
        if source.root is None:
            raise StructuralFailure(f"Model {source.name!r} has no root")

        model = FeatureModel(name=source.name, metadata=dict(source.metadata))
        self._add_root(model, source.root)
        for relation in source.relations:
            self._add_relation(model, relation.parent, relation.kind, list(relation.children))
        for constraint in source.constraints:
            self._add_constraint(model, constraint.kind, constraint.origin, constraint.destination)
        return model
