"""
Example feature model: a small mobile phone product line.

Covers every relation kind and both constraint kinds:

    MobilePhone
      +-- Calls             (mandatory)
      +-- Screen            (mandatory)
      |     +-- Basic | Colour | HighResolution   (alternative)
      +-- GPS               (optional)
      +-- Media             (optional)
            +-- Camera | MP3                       (or)

    Camera REQUIRES HighResolution
    GPS EXCLUDES Basic

The model has 14 products.
"""
from fmgen.model import Feature, FeatureModel, RelationKind, ConstraintKind


EXAMPLE_PHONE_PRODUCTS = 14


def build_example_phone_model() -> FeatureModel:
    model = FeatureModel(name="MobilePhone")

    names = ["MobilePhone", "Calls", "Screen", "GPS", "Media",
             "Basic", "Colour", "HighResolution", "Camera", "MP3"]
    f = {name: Feature(name=name, identifier=i) for i, name in enumerate(names)}

    model.add_root(f["MobilePhone"])
    model.add_relation(f["MobilePhone"], RelationKind.MANDATORY, [f["Calls"]])
    model.add_relation(f["MobilePhone"], RelationKind.MANDATORY, [f["Screen"]])
    model.add_relation(f["MobilePhone"], RelationKind.OPTIONAL, [f["GPS"]])
    model.add_relation(f["MobilePhone"], RelationKind.OPTIONAL, [f["Media"]])
    model.add_relation(f["Screen"], RelationKind.ALTERNATIVE,
                       [f["Basic"], f["Colour"], f["HighResolution"]])
    model.add_relation(f["Media"], RelationKind.OR, [f["Camera"], f["MP3"]])

    model.add_constraint(ConstraintKind.REQUIRES, f["Camera"], f["HighResolution"])
    model.add_constraint(ConstraintKind.EXCLUDES, f["GPS"], f["Basic"])

    model.metadata = {"source": "example"}
    return model
