"""
Generation Driver: random feature models together with their products.

Runs the model builder with a ProductSetMaintainer subscribed to it for the
duration of each attempt, so the products are derived while the model grows.
Some random draws are infeasible: they blow past the product cap, or the builder cannot realize
them. Those attempts are abandoned and the whole generation restarts with a
perturbed seed, up to max_attempts times.

States:
    ATTEMPTING -> SUCCEEDED
    ATTEMPTING -> RETRYING -> ATTEMPTING ...
    RETRYING   -> FAILED (attempt budget exhausted)
"""

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from fmgen.builder import ModelBuilder, ReplayModelBuilder
from fmgen.characteristics import GenerationCharacteristics
from fmgen.errors import (
    CapacityExceededError,
    StructuralFailure,
    GenerationError,
    GenerationFailure,
)
from fmgen.maintainer import ProductSetMaintainer
from fmgen.model import FeatureModel
from fmgen.products import Product

LOG = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 1000

# Seed increments are drawn from the signed 32-bit range
SEED_INCREMENT_MIN = -(2 ** 31)
SEED_INCREMENT_MAX = 2 ** 31 - 1


class GenerationState(Enum):
    IDLE = "idle"
    ATTEMPTING = "attempting"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class GenerationResult:
    """
    A generated model and its products.

    Properties:
        model: The constructed feature model
        products: All products, in insertion order
        number_of_products: Exact product count (always len(products))
        attempts: Failed attempts before this one succeeded
        seed: Seed of the successful attempt
    """

    model: FeatureModel
    products: Tuple[Product, ...]
    number_of_products: int
    attempts: int
    seed: int


@dataclass
class _AttemptOutcome:
    model: Optional[FeatureModel] = None
    error: Optional[Exception] = None

    @property
    def succeeded(self) -> bool:
        return self.model is not None


def perturb_seed(seed: int, rng: random.Random) -> int:
    """New seed from the previous seed and one fresh random draw."""
    return seed + rng.randint(SEED_INCREMENT_MIN, SEED_INCREMENT_MAX)


class MetamorphicGenerator:
    """
    Generates feature models and their products with bounded restarts.

    Properties:
        builder: Model builder to drive
        max_attempts: Attempt budget before GenerationFailure
        rng: Source of seed increments (seed it for reproducible retries)
        state: Current GenerationState
    """

    def __init__(self, builder: ModelBuilder, max_attempts: int = DEFAULT_MAX_ATTEMPTS,
                 rng: Optional[random.Random] = None):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.builder = builder
        self.max_attempts = max_attempts
        self.rng = rng or random.Random()
        self.state = GenerationState.IDLE
        self.maintainer = ProductSetMaintainer()

    @property
    def products(self) -> Tuple[Product, ...]:
        self._require_success()
        return self.maintainer.products

    @property
    def number_of_products(self) -> int:
        self._require_success()
        return self.maintainer.number_of_products

    def generate(self, characteristics: GenerationCharacteristics) -> GenerationResult:
        """
        Generate a model with the given characteristics and its products.

        The characteristics are never modified; every attempt works on a
        fresh clone.

        Raises:
            ConfigurationError: If the characteristics are invalid
            GenerationFailure: After max_attempts failed attempts
            InvariantViolation: If builder and maintainer disagree
        """
        characteristics.validate()
        LOG.info("The generation of the set of products may take several minutes...")

        attempt_ch = characteristics.clone()
        failures = 0
        last_error: Optional[Exception] = None

        while failures < self.max_attempts:
            self.state = GenerationState.ATTEMPTING
            outcome = self._attempt(attempt_ch)

            if outcome.succeeded:
                self.state = GenerationState.SUCCEEDED
                LOG.info("Number of tries: %d", failures)
                return GenerationResult(
                    model=outcome.model,
                    products=self.maintainer.products,
                    number_of_products=self.maintainer.number_of_products,
                    attempts=failures,
                    seed=attempt_ch.seed,
                )

            self.state = GenerationState.RETRYING
            last_error = outcome.error
            failures += 1
            seed = perturb_seed(attempt_ch.seed, self.rng)
            LOG.debug("Attempt %d failed (%s); retrying with seed %d", failures, last_error, seed)
            attempt_ch = characteristics.with_seed(seed)

        self.state = GenerationState.FAILED
        self.maintainer.reset()
        LOG.info("Generation failed after %d attempts", failures)
        raise GenerationFailure(failures, last_error)

    def _attempt(self, ch: GenerationCharacteristics) -> _AttemptOutcome:
        self.maintainer.reset(max_products=ch.max_products)
        # Subscribed only while this attempt runs; the builder may be shared
        self.builder.subscribe(self.maintainer)
        try:
            model = self.builder.build(ch)
        except (CapacityExceededError, StructuralFailure) as e:
            return _AttemptOutcome(error=e)
        finally:
            self.builder.unsubscribe(self.maintainer)
        return _AttemptOutcome(model=model)

    def _require_success(self) -> None:
        if self.state != GenerationState.SUCCEEDED:
            raise GenerationError(f"No generated products available (state: {self.state.value})")


def generate_products(model: FeatureModel, max_products: Optional[int] = None) -> GenerationResult:
    """
    Products of an existing model, derived by replaying its construction.

    Raises:
        GenerationFailure: If the model has more than max_products products
    """
    ch = GenerationCharacteristics(
        number_of_features=max(model.number_of_features, 1),
        max_products=max_products,
        model_name=model.name,
    )
    generator = MetamorphicGenerator(ReplayModelBuilder(model), max_attempts=1)
    return generator.generate(ch)
