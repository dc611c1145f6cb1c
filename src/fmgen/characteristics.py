"""
Generation Characteristics

The user's preferences for one random feature model: its size, the mix of
relation kinds, the amount of cross-tree constraints, the product cap and
the random seed.

A generator clones the characteristics before every attempt, so a failed
attempt never leaks state into the next one.
"""

from dataclasses import dataclass, replace
from typing import Optional

from fmgen.errors import ConfigurationError


@dataclass
class GenerationCharacteristics:
    """
    Properties:
        number_of_features:
            Total features in the model, root included

        percentage_mandatory / percentage_optional /
        percentage_alternative / percentage_or:
            Relative weight of each relation kind (must add up to 100)

        max_branching_factor:
            Maximum number of relations hanging below one parent

        max_set_children:
            Maximum number of children of an alternative or or group

        percentage_cross_tree_constraints:
            Constraints to add, as a percentage of the number of features

        percentage_requires:
            Share of constraints that are requires (the rest are excludes)

        max_products:
            Product cap enforced during generation (None = no cap)

        seed:
            Seed of the random model builder

        model_name:
            Name given to the generated model
    """

    number_of_features: int = 10
    percentage_mandatory: int = 25
    percentage_optional: int = 25
    percentage_alternative: int = 25
    percentage_or: int = 25
    max_branching_factor: int = 4
    max_set_children: int = 3
    percentage_cross_tree_constraints: int = 0
    percentage_requires: int = 50
    max_products: Optional[int] = 1000
    seed: int = 0
    model_name: str = "RandomFM"

    def validate(self) -> None:
        """
        Check the characteristics are usable.

        Raises:
            ConfigurationError: On the first problem found
        """
        if self.number_of_features < 1:
            raise ConfigurationError(
                f"number_of_features must be at least 1, got {self.number_of_features}"
            )
        relation_weights = {
            "percentage_mandatory": self.percentage_mandatory,
            "percentage_optional": self.percentage_optional,
            "percentage_alternative": self.percentage_alternative,
            "percentage_or": self.percentage_or,
        }
        percentages = dict(relation_weights)
        percentages["percentage_cross_tree_constraints"] = self.percentage_cross_tree_constraints
        percentages["percentage_requires"] = self.percentage_requires
        for name, value in percentages.items():
            if not 0 <= value <= 100:
                raise ConfigurationError(f"{name} must be between 0 and 100, got {value}")
        total = sum(relation_weights.values())
        if total != 100:
            raise ConfigurationError(f"Relation percentages must add up to 100, got {total}")
        if self.max_branching_factor < 1:
            raise ConfigurationError(
                f"max_branching_factor must be at least 1, got {self.max_branching_factor}"
            )
        if self.max_set_children < 2:
            raise ConfigurationError(
                f"max_set_children must be at least 2, got {self.max_set_children}"
            )
        if self.max_products is not None and self.max_products < 1:
            raise ConfigurationError(f"max_products must be at least 1, got {self.max_products}")

    def clone(self) -> "GenerationCharacteristics":
        return replace(self)

    def with_seed(self, seed: int) -> "GenerationCharacteristics":
        return replace(self, seed=seed)

    @property
    def number_of_constraints(self) -> int:
        return round(self.number_of_features * self.percentage_cross_tree_constraints / 100)
