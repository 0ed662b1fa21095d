from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Literal, Mapping, Union

from eos_upror.errors import UnknownFieldError


@dataclass(frozen=True)
class ContinuousField:
    """Configuration for a free-text numeric input field."""

    key: str
    label: str
    unit: str

    @property
    def kind(self) -> Literal["continuous"]:
        return "continuous"


@dataclass(frozen=True)
class CategoricalField:
    """Configuration for a closed-choice input field.

    The order of ``options`` fixes the one-hot slot order and has to match the
    order the model was trained with.
    """

    key: str
    label: str
    options: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.options:
            raise ValueError(f"Categorical field '{self.key}' needs at least one option.")
        if len(set(self.options)) != len(self.options):
            raise ValueError(f"Categorical field '{self.key}' has duplicate options: {self.options}")

    @property
    def kind(self) -> Literal["categorical"]:
        return "categorical"


FieldDescriptor = Union[ContinuousField, CategoricalField]

_FIELDS: tuple[FieldDescriptor, ...] = (
    ContinuousField("age_at_insertion", "Age at insertion", "years"),
    ContinuousField("height_pre", "Height at insertion", "cm"),
    ContinuousField("weight_pre", "Weight at insertion", "kg"),
    CategoricalField(
        "eos_type",
        "EOS etiology",
        ("Congenital", "Idiopathic", "Neuromuscular", "Syndromic"),
    ),
    CategoricalField("amb_status_preop", "Ambulatory status", ("Ambulatory", "Non-ambulatory")),
    ContinuousField("major_cobb_angle_pre", "Major Cobb angle", "degrees"),
    ContinuousField("minor_cobb_angle_pre", "Minor Cobb angle", "degrees"),
    ContinuousField("kyphosis_pre", "Kyphosis", "degrees"),
    CategoricalField("construct_type_initial", "Initial construct type", ("MCGR", "TGR", "VEPTR")),
    CategoricalField("construct_side_initial", "Initial construct laterality", ("Bilateral", "Unilateral")),
    CategoricalField("superior_attach_initial", "Superior anchor site", ("Spine", "Rib")),
    ContinuousField("num_superior_anchors_initial", "Number of superior anchors", "anchors"),
    CategoricalField("inferior_attach_initial", "Inferior anchor site", ("Spine", "Pelvis")),
)

SCHEMA: Mapping[str, FieldDescriptor] = MappingProxyType({field.key: field for field in _FIELDS})

CATEGORY_GROUPING: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Patient factors", ("age_at_insertion", "height_pre", "weight_pre", "eos_type", "amb_status_preop")),
    ("Radiographic factors", ("major_cobb_angle_pre", "minor_cobb_angle_pre", "kyphosis_pre")),
    (
        "Planned construct",
        (
            "construct_type_initial",
            "construct_side_initial",
            "superior_attach_initial",
            "num_superior_anchors_initial",
            "inferior_attach_initial",
        ),
    ),
)


def _check_grouping() -> None:
    grouped = [key for _, keys in CATEGORY_GROUPING for key in keys]
    if len(SCHEMA) != len(_FIELDS):
        raise RuntimeError("Field schema contains duplicate keys.")
    if sorted(grouped) != sorted(SCHEMA):
        raise RuntimeError("Category grouping must cover every schema key exactly once.")


_check_grouping()


def describe(key: str) -> FieldDescriptor:
    """Return the descriptor of a field.

    Args:
        key: Field key.

    Returns:
        The continuous or categorical field descriptor.

    Raises:
        UnknownFieldError: If the key is not part of the schema.
    """
    try:
        return SCHEMA[key]
    except KeyError:
        raise UnknownFieldError(key) from None


def grouped_keys() -> tuple[tuple[str, tuple[str, ...]], ...]:
    """Return the display sections as (category label, field keys) pairs."""
    return CATEGORY_GROUPING


def continuous_keys() -> list[str]:
    return [key for key, field in SCHEMA.items() if isinstance(field, ContinuousField)]


def categorical_keys() -> list[str]:
    return [key for key, field in SCHEMA.items() if isinstance(field, CategoricalField)]
