"""
Product-Set Maintainer: incremental products of a model under construction.

Keeps a bounded product collection and an exact product count consistent
with a partially built feature model. Each construction primitive has a
closed-form update rule ("metamorphic relation"):

    Primitive      Effect on every product p holding the parent     Count
    ------------   ----------------------------------------------   ---------------
    root           collection becomes [{root}]                      = 1
    mandatory      child added to p                                  + 0
    optional       p kept, clone of p + child appended               + m
    alternative    children[0] added to p, one clone per other child + m * (k - 1)
    or             like alternative, plus one clone per subset of    + m * (2^k - 2)
                   two or more children
    excludes       products holding both features removed            - removed
    requires       products holding origin but not destination      - removed
                   removed

(m = products holding the parent, k = number of children)

Clones are collected per primitive and inserted in one all-or-nothing batch,
so a capacity failure leaves the collection as it was before the primitive.
"""

import logging
from typing import Iterator, List, Optional, Sequence, Tuple, Union

from fmgen.combinations import combinations
from fmgen.errors import CapacityExceededError, InvariantViolation, PreconditionViolation
from fmgen.model import Feature
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
from fmgen.products import Product, BoundedProductList

LOG = logging.getLogger(__name__)

_UNCHANGED = object()


class ProductSetMaintainer:
    """
    Subscriber that applies construction primitives to a product set.

    Register an instance as a builder hook: it is callable with a primitive.

    Properties:
        max_products: Capacity of the product collection (None = unbounded)
    """

    def __init__(self, max_products: Optional[int] = None):
        self.max_products = max_products
        self._products = BoundedProductList(max_products)
        self._count = 0
        self._rooted = False

    # =========================================================================
    # LIFECYCLE AND ACCESSORS
    # =========================================================================

    def reset(self, max_products: Union[Optional[int], object] = _UNCHANGED) -> None:
        """Discard all products. The capacity changes only if one is given (None = unbounded)."""
        if max_products is not _UNCHANGED:
            self.max_products = max_products
        self._products = BoundedProductList(self.max_products)
        self._count = 0
        self._rooted = False

    @property
    def products(self) -> Tuple[Product, ...]:
        return tuple(self._products)

    @property
    def number_of_products(self) -> int:
        return self._count

    def __len__(self) -> int:
        return len(self._products)

    def __iter__(self) -> Iterator[Product]:
        return iter(self._products)

    def __call__(self, primitive: Primitive) -> None:
        self.apply(primitive)

    # =========================================================================
    # DISPATCH
    # =========================================================================

    def apply(self, primitive: Primitive) -> None:
        """
        Apply one construction primitive.

        Raises:
            CapacityExceededError: If the products would exceed max_products
            InvariantViolation: If the primitive contradicts the current products
        """
        before = self._count

        if isinstance(primitive, AddRoot):
            self.update_root(primitive.root)
        elif isinstance(primitive, AddMandatory):
            self.update_mandatory(primitive.parent, primitive.child)
        elif isinstance(primitive, AddOptional):
            self.update_optional(primitive.parent, primitive.child)
        elif isinstance(primitive, AddAlternativeGroup):
            self.update_alternative(primitive.parent, list(primitive.children))
        elif isinstance(primitive, AddOrGroup):
            self.update_or(primitive.parent, list(primitive.children))
        elif isinstance(primitive, AddExcludesConstraint):
            self.update_excludes(primitive.origin, primitive.destination)
        elif isinstance(primitive, AddRequiresConstraint):
            self.update_requires(primitive.origin, primitive.destination)
        else:
            raise TypeError(f"Unsupported primitive type: {type(primitive)}")

        if self._count != len(self._products):
            raise InvariantViolation(
                f"Product count {self._count} diverged from collection size {len(self._products)}"
            )
        LOG.debug(
            "%s applied: %+d products (now %d)",
            primitive.kind.value, self._count - before, self._count,
        )

    # =========================================================================
    # UPDATE RULES
    # =========================================================================

    def update_root(self, root: Feature) -> None:
        self._products = BoundedProductList(self.max_products)
        self._count = 0
        self._products.append(Product([root]))
        self._count = 1
        self._rooted = True

    def update_mandatory(self, parent: Feature, child: Feature) -> None:
        for p in self._parent_products(parent):
            p.add(child)

    def update_optional(self, parent: Feature, child: Feature) -> None:
        matching = self._parent_products(parent)
        self._check_absent(matching, [child])

        pending: List[Product] = []
        for p in matching:
            np = p.clone()
            np.add(child)
            self._stage(pending, np)

        self._commit(pending)

    def update_alternative(self, parent: Feature, children: Sequence[Feature]) -> None:
        matching = self._parent_products(parent)
        self._check_group(matching, children)

        pending: List[Product] = []
        for p in matching:
            for child in children[1:]:
                np = p.clone()
                np.add(child)
                self._stage(pending, np)

        self._commit(pending)
        for p in matching:
            p.add(children[0])

    def update_or(self, parent: Feature, children: Sequence[Feature]) -> None:
        matching = self._parent_products(parent)
        self._check_group(matching, children)

        pending: List[Product] = []
        for p in matching:
            # Subsets of one element; {children[0]} is p itself
            for child in children[1:]:
                np = p.clone()
                np.add(child)
                self._stage(pending, np)

            # Subsets of two or more elements
            for size in range(2, len(children) + 1):
                for indices in combinations(len(children), size):
                    np = p.clone()
                    for i in indices:
                        np.add(children[i])
                    self._stage(pending, np)

        self._commit(pending)
        for p in matching:
            p.add(children[0])

    def update_excludes(self, origin: Feature, destination: Feature) -> None:
        removed = self._products.remove_where(
            lambda p: p.contains(origin) and p.contains(destination)
        )
        self._count -= removed

    def update_requires(self, origin: Feature, destination: Feature) -> None:
        removed = self._products.remove_where(
            lambda p: p.contains(origin) and not p.contains(destination)
        )
        self._count -= removed

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _parent_products(self, parent: Feature) -> List[Product]:
        if not self._rooted:
            raise InvariantViolation(f"Relation under {parent.name} received before the root")
        matching = [p for p in self._products if p.contains(parent)]
        if not matching:
            raise InvariantViolation(f"Parent feature {parent.name} appears in no product")
        return matching

    def _check_absent(self, matching: List[Product], children: Sequence[Feature]) -> None:
        for p in matching:
            for child in children:
                if p.contains(child):
                    raise PreconditionViolation(
                        f"Feature {child.name} already appears in a product of its parent"
                    )

    def _check_group(self, matching: List[Product], children: Sequence[Feature]) -> None:
        if not children:
            raise PreconditionViolation("Group relation without children")
        if len(set(children)) != len(children):
            raise PreconditionViolation(
                f"Duplicate children in group: {', '.join(c.name for c in children)}"
            )
        self._check_absent(matching, children)

    def _stage(self, pending: List[Product], product: Product) -> None:
        remaining = self._products.remaining()
        if remaining is not None and len(pending) >= remaining:
            raise CapacityExceededError(self.max_products, len(self._products) + len(pending) + 1)
        pending.append(product)

    def _commit(self, pending: List[Product]) -> None:
        self._products.extend(pending)
        self._count += len(pending)
