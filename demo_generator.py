"""
Demo: Generate a random feature model with its products and print a report.

Usage:
    python demo_generator.py [characteristics.yaml]
"""

import logging
import sys

from fmgen.analyzer import analyze_model
from fmgen.builder import RandomModelBuilder
from fmgen.characteristics import GenerationCharacteristics
from fmgen.generator import MetamorphicGenerator
from fmgen.serialization import load_characteristics, model_to_yaml


def print_report(result, report):
    """Pretty-print a generation result and its ModelReport."""
    print()
    print("=" * 70)
    print(f"FEATURE MODEL: {report.model_name}")
    print("=" * 70)
    print()

    print("GENERATION")
    print(f"  Seed:                  {result.seed}")
    print(f"  Failed attempts:       {result.attempts}")
    print(f"  Products:              {result.number_of_products}")
    print()

    print("STRUCTURE")
    print(f"  Features:              {report.total_features}")
    print(f"  Depth:                 {report.depth}")
    for kind, count in report.relations_by_kind.items():
        print(f"  {kind.capitalize() + ' relations:':<23}{count}")
    for kind, count in report.constraints_by_kind.items():
        print(f"  {kind.capitalize() + ' constraints:':<23}{count}")
    print()

    print("PRODUCTS")
    print(f"  Variability:           {report.variability:.6f}")
    print(f"  Core features:         {', '.join(sorted(report.core_features)) or 'None'}")
    print(f"  Dead features:         {', '.join(sorted(report.dead_features)) or 'None'}")
    for product in result.products[:10]:
        print(f"    {{{', '.join(product.feature_names())}}}")
    if result.number_of_products > 10:
        print(f"    ... {result.number_of_products - 10} more")
    print()

    if report.warnings:
        print("WARNINGS")
        for i, warning in enumerate(report.warnings, 1):
            print(f"  {i}. {warning}")
    else:
        print("NO WARNINGS")
    print()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    if len(sys.argv) > 1:
        characteristics = load_characteristics(sys.argv[1])
    else:
        characteristics = GenerationCharacteristics(
            number_of_features=15,
            percentage_cross_tree_constraints=10,
            max_products=2000,
            seed=2204,
        )

    generator = MetamorphicGenerator(RandomModelBuilder())
    result = generator.generate(characteristics)
    report = analyze_model(result.model, products=result.products)

    print_report(result, report)

    with open("generated_model.yaml", "w") as f:
        f.write(model_to_yaml(result.model))
    print("Model exported to generated_model.yaml")
