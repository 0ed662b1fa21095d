from __future__ import annotations

from functools import partial

import anyio
import streamlit as st
from loguru import logger
from streamlit.delta_generator import DeltaGenerator

from eos_upror import constants
from eos_upror.calculator import calculate_risk
from eos_upror.errors import EncodingError, InferenceError, ModelLoadError, ValidationError
from eos_upror.form import FormValues
from eos_upror.inference import InferenceInvoker, InvokerState
from eos_upror.presenter import format_result
from eos_upror.schema import CategoricalField, ContinuousField, describe, grouped_keys
from eos_upror.settings import settings

BASE_CSS = """
@import url('https://fonts.googleapis.com/css2?family=Space+Grotesk:wght@400;600;700&display=swap');

:root {
  --text: #1f2937;
  --muted: #475569;
  --accent: #1f5f7a;
  --card: rgba(255, 255, 255, 0.85);
  --border: rgba(15, 23, 42, 0.12);
}

h1, h2, h3, h4, h5 {
  font-family: "Space Grotesk", sans-serif;
  letter-spacing: -0.02em;
}

#MainMenu, footer {
  visibility: hidden;
}

div[data-testid="stForm"] {
  background: var(--card);
  border: 1px solid var(--border);
  border-radius: 20px;
  padding: 1.4rem 1.6rem;
}

button[kind="primary"] {
  background: var(--accent);
  border-radius: 14px;
  font-weight: 600;
}

.result-line {
  color: var(--accent);
  font-family: "Space Grotesk", sans-serif;
  font-size: 1.35rem;
  font-weight: 600;
}
"""


@st.cache_resource
def get_invoker() -> InferenceInvoker:
    """Return the process-wide inference invoker."""
    return InferenceInvoker.from_settings(settings)


def apply_base_styles() -> None:
    """Inject the base theme styling."""
    st.markdown(f"<style>{BASE_CSS}</style>", unsafe_allow_html=True)


def render_continuous_field(field: ContinuousField) -> str:
    """Render a free-text numeric input with its unit.

    Args:
        field: Continuous field configuration.

    Returns:
        The raw text typed by the user.
    """
    return st.text_input(f"{field.label} ({field.unit})", key=f"{field.key}_value")


def render_categorical_field(field: CategoricalField) -> str | None:
    """Render a select box without a preselected option.

    Args:
        field: Categorical field configuration.

    Returns:
        The selected option, or None while nothing is selected.
    """
    return st.selectbox(
        field.label,
        field.options,
        index=None,
        placeholder="Select...",
        key=f"{field.key}_choice",
    )


def render_form() -> tuple[FormValues, dict[str, DeltaGenerator], bool]:
    """Render the grouped calculator form.

    Returns:
        Tuple of the form values, an error slot per field and the submit flag.
    """
    values = FormValues()
    error_slots = {}

    with st.form("upror_form"):
        for category, keys in grouped_keys():
            st.subheader(f"{category}:")
            for key in keys:
                field = describe(key)
                if isinstance(field, ContinuousField):
                    values.set(key, render_continuous_field(field))
                else:
                    values.set(key, render_categorical_field(field))
                error_slots[key] = st.empty()

        submitted = st.form_submit_button("Calculate", type="primary")

    return values, error_slots, submitted


def submit(values: FormValues, invoker: InferenceInvoker) -> float:
    """Run one submission, retrying a previously failed invoker from scratch."""
    if invoker.state is InvokerState.FAILED:
        invoker.reset()
    return anyio.run(partial(calculate_risk, values, invoker, strict=settings.strict_encoding))


def render_result(result: str | None) -> None:
    """Render the result line, blank until the first successful submission."""
    st.markdown(f'<div class="result-line">{result or "&nbsp;"}</div>', unsafe_allow_html=True)


def main() -> None:
    """Run the Streamlit frontend."""
    st.set_page_config(page_title=constants.APP_TITLE, layout="centered")
    apply_base_styles()

    st.title(constants.APP_TITLE)
    st.write(constants.APP_DESCRIPTION)

    if "last_result" not in st.session_state:
        st.session_state["last_result"] = None

    values, error_slots, submitted = render_form()
    error: str | None = None

    if submitted:
        try:
            probability = submit(values, get_invoker())
        except ValidationError as exc:
            for key, reason in exc.errors:
                error_slots[key].error(reason)
        except EncodingError as exc:
            for key in exc.keys:
                error_slots[key].error("Not a recognised value")
        except (ModelLoadError, InferenceError) as exc:
            logger.error(f"Error running UPROR model: {exc}")
            error = "The risk model could not produce a result. Please try again."
        else:
            st.session_state["last_result"] = format_result(probability)

    if error:
        st.error(error)
    render_result(st.session_state.get("last_result"))


if __name__ == "__main__":
    main()
