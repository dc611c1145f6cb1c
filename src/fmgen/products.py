"""
Products and the bounded product collection.

A Product is one valid configuration: a set of feature references. It is a
plain value type, so branching on a choice is a cheap copy of the set.

BoundedProductList is an insertion-ordered sequence with a hard ceiling. It
exists to bound memory while a model is generated; it never evicts.
"""

from typing import Callable, FrozenSet, Iterable, Iterator, List, Optional

from fmgen.errors import CapacityExceededError
from fmgen.model import Feature


class Product:
    """
    A configuration of a feature model.

    Mutable while the model is under construction, logically immutable once
    generation has succeeded.
    """

    __slots__ = ("_features",)

    def __init__(self, features: Iterable[Feature] = ()):
        self._features = set(features)

    @property
    def features(self) -> FrozenSet[Feature]:
        return frozenset(self._features)

    def add(self, feature: Feature) -> None:
        self._features.add(feature)

    def contains(self, feature: Feature) -> bool:
        return feature in self._features

    def clone(self) -> "Product":
        """Copy the feature references into a new, independent product."""
        return Product(self._features)

    def feature_names(self) -> List[str]:
        return sorted(f.name for f in self._features)

    def __contains__(self, feature: Feature) -> bool:
        return feature in self._features

    def __len__(self) -> int:
        return len(self._features)

    def __iter__(self) -> Iterator[Feature]:
        return iter(self._features)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Product):
            return NotImplemented
        return self._features == other._features

    def __repr__(self) -> str:
        return f"Product({{{', '.join(self.feature_names())}}})"


class BoundedProductList:
    """
    Insertion-ordered products with a fixed capacity.

    Properties:
        capacity: Maximum number of products, or None for no ceiling

    Insertions past capacity raise CapacityExceededError. extend() is
    all-or-nothing: nothing is inserted if the batch does not fit.
    """

    def __init__(self, capacity: Optional[int] = None):
        if capacity is not None and capacity < 0:
            raise ValueError(f"capacity must be non-negative, got {capacity}")
        self.capacity = capacity
        self._items: List[Product] = []

    def append(self, product: Product) -> None:
        if self.capacity is not None and len(self._items) >= self.capacity:
            raise CapacityExceededError(self.capacity, len(self._items) + 1)
        self._items.append(product)

    def extend(self, products: Iterable[Product]) -> None:
        batch = list(products)
        if self.capacity is not None and len(self._items) + len(batch) > self.capacity:
            raise CapacityExceededError(self.capacity, len(self._items) + len(batch))
        self._items.extend(batch)

    def remove_where(self, predicate: Callable[[Product], bool]) -> int:
        """Remove every product matching predicate. Returns how many were removed."""
        kept = [p for p in self._items if not predicate(p)]
        removed = len(self._items) - len(kept)
        self._items = kept
        return removed

    def remaining(self) -> Optional[int]:
        """Free slots left, or None when unbounded."""
        if self.capacity is None:
            return None
        return self.capacity - len(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Product]:
        return iter(self._items)

    def __repr__(self) -> str:
        return f"BoundedProductList(size={len(self._items)}, capacity={self.capacity})"
