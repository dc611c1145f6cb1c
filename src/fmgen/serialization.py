"""
Serialization helpers for fmgen objects (FeatureModel, characteristics, products).

Provides lossless JSON/YAML round-trip via intermediate dict representation.
Features are written by name in relations, constraints and products; the
identifiers live in the model's feature list.
"""
from __future__ import annotations

import dataclasses
import json
from typing import Any, Dict, List, Sequence

import yaml

from fmgen.characteristics import GenerationCharacteristics
from fmgen.errors import ConfigurationError, ModelError
from fmgen.model import (
    Feature,
    FeatureModel,
    Relation,
    RelationKind,
    ConstraintKind,
    CrossTreeConstraint,
)
from fmgen.products import Product


def feature_to_dict(f: Feature) -> Dict[str, Any]:
    return {"name": f.name, "id": f.identifier}


def feature_from_dict(d: Dict[str, Any]) -> Feature:
    return Feature(name=d["name"], identifier=d.get("id", 0))


def relation_to_dict(r: Relation) -> Dict[str, Any]:
    return {
        "parent": r.parent.name,
        "kind": r.kind.value,
        "children": [c.name for c in r.children],
    }


def constraint_to_dict(c: CrossTreeConstraint) -> Dict[str, Any]:
    return {"kind": c.kind.value, "origin": c.origin.name, "destination": c.destination.name}


def model_to_dict(m: FeatureModel) -> Dict[str, Any]:
    return {
        "name": m.name,
        "root": m.root.name if m.root else None,
        "features": [feature_to_dict(f) for f in m.features],
        "relations": [relation_to_dict(r) for r in m.relations],
        "constraints": [constraint_to_dict(c) for c in m.constraints],
        "metadata": m.metadata,
    }


def model_from_dict(d: Dict[str, Any]) -> FeatureModel:
    """
    Rebuild a model. Relations must be listed parents-first, as written.

    Raises:
        ModelError: On unknown feature names or an inconsistent structure
    """
    features = {}
    for fd in d.get("features", []):
        f = feature_from_dict(fd)
        features[f.name] = f

    def lookup(name: str) -> Feature:
        if name not in features:
            raise ModelError(f"Unknown feature name: {name}")
        return features[name]

    m = FeatureModel(name=d.get("name", ""))
    if d.get("root") is not None:
        m.add_root(lookup(d["root"]))
    for rd in d.get("relations", []):
        m.add_relation(
            lookup(rd["parent"]),
            RelationKind(rd["kind"]),
            [lookup(name) for name in rd.get("children", [])],
        )
    for cd in d.get("constraints", []):
        m.add_constraint(ConstraintKind(cd["kind"]), lookup(cd["origin"]), lookup(cd["destination"]))
    m.metadata = d.get("metadata") or {}
    return m


def model_to_json(m: FeatureModel) -> str:
    return json.dumps(model_to_dict(m), sort_keys=True)


def model_from_json(s: str) -> FeatureModel:
    d = json.loads(s)
    return model_from_dict(d)


def model_to_yaml(m: FeatureModel) -> str:
    return yaml.safe_dump(model_to_dict(m), sort_keys=False)


def model_from_yaml(s: str) -> FeatureModel:
    d = yaml.safe_load(s)
    return model_from_dict(d)


def products_to_list(products: Sequence[Product]) -> List[List[str]]:
    """Products as sorted feature-name lists, in collection order."""
    return [p.feature_names() for p in products]


def products_from_list(data: Sequence[Sequence[str]], model: FeatureModel) -> List[Product]:
    products = []
    for names in data:
        features = []
        for name in names:
            f = model.get_feature(name)
            if f is None:
                raise ModelError(f"Unknown feature name: {name}")
            features.append(f)
        products.append(Product(features))
    return products


def characteristics_to_dict(ch: GenerationCharacteristics) -> Dict[str, Any]:
    return dataclasses.asdict(ch)


def characteristics_from_dict(d: Dict[str, Any] | None) -> GenerationCharacteristics:
    """
    Build characteristics from a (possibly partial) dict; missing keys keep defaults.

    Raises:
        ConfigurationError: On unknown keys or invalid values
    """
    d = d or {}
    known = {f.name for f in dataclasses.fields(GenerationCharacteristics)}
    unknown = set(d) - known
    if unknown:
        raise ConfigurationError(f"Unknown characteristics: {', '.join(sorted(unknown))}")
    ch = GenerationCharacteristics(**d)
    ch.validate()
    return ch


def characteristics_to_yaml(ch: GenerationCharacteristics) -> str:
    return yaml.safe_dump(characteristics_to_dict(ch), sort_keys=False)


def characteristics_from_yaml(s: str) -> GenerationCharacteristics:
    d = yaml.safe_load(s)
    if d is not None and not isinstance(d, dict):
        raise ConfigurationError("Characteristics YAML must be a mapping")
    return characteristics_from_dict(d)


def load_characteristics(path: str) -> GenerationCharacteristics:
    with open(path) as fh:
        return characteristics_from_yaml(fh.read())
