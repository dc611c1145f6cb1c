"""
Metamorphic Feature-Model Generator (fmgen)

Generates random feature models together with their exact set of products.

The products are NOT computed by a solver once the model exists. They are
maintained incrementally while the model is built, one update rule per
construction primitive (the "metamorphic relations"):

    - root         -> one product {root}
    - mandatory    -> child added to every product holding the parent
    - optional     -> every product holding the parent is duplicated
    - alternative  -> one branch per child
    - or           -> one branch per non-empty subset of children
    - excludes     -> products holding both features are dropped
    - requires     -> products holding origin but not destination are dropped

A hard product cap bounds memory during generation. When the cap is hit the
whole generation is retried with a perturbed seed.
"""

from fmgen.errors import (
    FMGenError,
    ConfigurationError,
    ModelError,
    CapacityExceededError,
    StructuralFailure,
    InvariantViolation,
    PreconditionViolation,
    GenerationError,
    GenerationFailure,
)
from fmgen.model import Feature, FeatureModel, RelationKind, ConstraintKind
from fmgen.characteristics import GenerationCharacteristics
from fmgen.products import Product, BoundedProductList
from fmgen.maintainer import ProductSetMaintainer
from fmgen.builder import ModelBuilder, RandomModelBuilder, ReplayModelBuilder
from fmgen.generator import (
    MetamorphicGenerator,
    GenerationResult,
    GenerationState,
    generate_products,
)

__version__ = "0.1.0"

__all__ = [
    "FMGenError",
    "ConfigurationError",
    "ModelError",
    "CapacityExceededError",
    "StructuralFailure",
    "InvariantViolation",
    "PreconditionViolation",
    "GenerationError",
    "GenerationFailure",
    "Feature",
    "FeatureModel",
    "RelationKind",
    "ConstraintKind",
    "GenerationCharacteristics",
    "Product",
    "BoundedProductList",
    "ProductSetMaintainer",
    "ModelBuilder",
    "RandomModelBuilder",
    "ReplayModelBuilder",
    "MetamorphicGenerator",
    "GenerationResult",
    "GenerationState",
    "generate_products",
]
