import pytest
import streamlit as st
from streamlit.testing.v1 import AppTest

from eos_upror.inference import InferenceInvoker
from eos_upror.schema import SCHEMA, CategoricalField
from eos_upror.settings import settings
from tests import _FRONTEND_PATH
from tests.conftest import COMPLETE_RECORD, FakeSessionFactory

APP_TIMEOUT = 30


@pytest.fixture()
def app(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "model_path", str(tmp_path / "missing.onnx"))
    st.cache_resource.clear()
    at = AppTest.from_file(str(_FRONTEND_PATH), default_timeout=APP_TIMEOUT)
    return at.run()


def _fill(at: AppTest, record: dict) -> None:
    for key, value in record.items():
        if isinstance(SCHEMA[key], CategoricalField):
            at.selectbox(key=f"{key}_choice").select(value)
        else:
            at.text_input(key=f"{key}_value").input(str(value))


def test_form_renders_every_field(app):
    assert not app.exception
    assert len(app.text_input) == 7
    assert len(app.selectbox) == 6
    assert [subheader.value for subheader in app.subheader] == [
        "Patient factors:",
        "Radiographic factors:",
        "Planned construct:",
    ]
    assert app.selectbox(key="eos_type_choice").options == ["Congenital", "Idiopathic", "Neuromuscular", "Syndromic"]
    assert app.selectbox(key="eos_type_choice").value is None


def test_empty_submission_shows_inline_errors(app):
    app.button[0].click().run()

    assert not app.exception
    assert [error.value for error in app.error] == ["Required"] * len(SCHEMA)
    assert not any("Predicted UPROR Risk" in markdown.value for markdown in app.markdown)


def test_non_numeric_value_is_flagged(app):
    _fill(app, {**COMPLETE_RECORD, "kyphosis_pre": "forty"})
    app.button[0].click().run()

    assert [error.value for error in app.error] == ["Must be a number"]


def test_model_failure_leaves_result_blank(app):
    _fill(app, COMPLETE_RECORD)
    app.button[0].click().run()

    assert not app.exception
    assert len(app.error) == 1
    assert "could not produce a result" in app.error[0].value
    assert not any("Predicted UPROR Risk" in markdown.value for markdown in app.markdown)


def test_successful_submission_shows_result(monkeypatch, app):
    factory = FakeSessionFactory()
    monkeypatch.setattr(
        InferenceInvoker,
        "from_settings",
        classmethod(lambda cls, settings: cls(settings.model_path, session_factory=factory)),
    )
    st.cache_resource.clear()

    _fill(app, COMPLETE_RECORD)
    app.button[0].click().run()

    assert not app.exception
    assert not app.error
    assert any("Predicted UPROR Risk: 27%" in markdown.value for markdown in app.markdown)
    assert len(factory.loads) == 1


def test_form_keeps_values_after_submission(app):
    _fill(app, COMPLETE_RECORD)
    app.button[0].click().run()
    app.button[0].click().run()

    assert not app.exception
    assert app.text_input(key="age_at_insertion_value").value == "10"
    assert app.selectbox(key="eos_type_choice").value == "Congenital"
    assert "Required" not in [error.value for error in app.error]
