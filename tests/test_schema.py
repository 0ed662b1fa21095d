import pytest

from eos_upror.errors import UnknownFieldError
from eos_upror.form import FormValues
from eos_upror.schema import (
    SCHEMA,
    CategoricalField,
    ContinuousField,
    categorical_keys,
    continuous_keys,
    describe,
    grouped_keys,
)


def test_schema_has_thirteen_fields():
    assert len(SCHEMA) == 13
    assert len(continuous_keys()) == 7
    assert len(categorical_keys()) == 6


def test_schema_is_read_only():
    with pytest.raises(TypeError):
        SCHEMA["new_field"] = ContinuousField("new_field", "New", "units")  # type: ignore[index]


def test_describe_returns_descriptor():
    field = describe("construct_type_initial")
    assert isinstance(field, CategoricalField)
    assert field.options == ("MCGR", "TGR", "VEPTR")
    assert field.kind == "categorical"

    field = describe("kyphosis_pre")
    assert isinstance(field, ContinuousField)
    assert field.unit == "degrees"
    assert field.kind == "continuous"


def test_describe_unknown_field_raises():
    with pytest.raises(UnknownFieldError) as exc_info:
        describe("bmi")
    assert exc_info.value.key == "bmi"
    assert isinstance(exc_info.value, KeyError)


def test_grouping_covers_every_key_once():
    grouped = [key for _, keys in grouped_keys() for key in keys]
    assert sorted(grouped) == sorted(SCHEMA)
    assert len(grouped) == len(set(grouped))
    assert [category for category, _ in grouped_keys()] == [
        "Patient factors",
        "Radiographic factors",
        "Planned construct",
    ]


@pytest.mark.parametrize("options", [(), ("Spine", "Spine")])
def test_categorical_field_rejects_bad_options(options):
    with pytest.raises(ValueError):
        CategoricalField("inferior_attach_initial", "Inferior anchor site", options)


def test_form_values_start_unset_and_reset():
    values = FormValues()
    assert values.unset_keys() == list(SCHEMA)

    values.set("eos_type", "Syndromic")
    values.set("age_at_insertion", "7.5")
    assert values["eos_type"] == "Syndromic"
    assert "eos_type" not in values.unset_keys()

    values.clear("eos_type")
    assert values["eos_type"] is None

    values.reset()
    assert all(value is None for value in values.values())


def test_form_values_reject_unknown_keys():
    values = FormValues()
    with pytest.raises(UnknownFieldError):
        values.set("unknown_feature", 1)
    assert values.get("unknown_feature") is None
