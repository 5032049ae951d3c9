"""
Streamlit bindings for form controllers.

Widgets write their value into ``st.session_state`` and forward it to the
controller from their ``on_change`` callback, so the controller sees every
edit before the script reruns.
"""

from typing import Any, Callable, Dict, Optional
import logging

import streamlit as st

from .controller import FormController
from .parsers import to_value_string

logger = logging.getLogger(__name__)


def controller_key(form_name: str) -> str:
    return f"form_controller_{form_name}"


def widget_key(form_name: str, field_name: str) -> str:
    return f"{form_name}_field_{field_name}"


def get_or_create_form(form_name: str, factory: Callable[[], FormController]) -> FormController:
    """
    Return the controller kept in session state, creating it on first run.
    
    Args:
        form_name: Unique name of the form on the page
        factory: Builds the controller when none exists yet
        
    Returns:
        FormController instance
    """
    key = controller_key(form_name)
    if key not in st.session_state:
        st.session_state[key] = factory()
        logger.info(f"Created form controller '{form_name}'")
    return st.session_state[key]


def discard_form(form_name: str, field_names: Optional[list] = None) -> None:
    """Drop a form controller and its widget values from session state."""
    key = controller_key(form_name)
    form = st.session_state.get(key)
    if form is not None and field_names is None:
        field_names = list(form.initial_value)
    
    for field_name in field_names or []:
        w_key = widget_key(form_name, field_name)
        if w_key in st.session_state:
            del st.session_state[w_key]
    
    if key in st.session_state:
        del st.session_state[key]
    logger.info(f"Discarded form controller '{form_name}'")


def _on_text_change(form: FormController, field_name: str, w_key: str) -> None:
    form.handle_change(field_name, st.session_state[w_key])


def _on_value_change(form: FormController, field_name: str, w_key: str) -> None:
    value = st.session_state[w_key]
    # Keep the raw text in step so validate() re-parses the new value
    form.handle_data_change(field_name, value)
    form.handle_change(field_name, to_value_string(value))


def render_field_error(form: FormController, field_name: str) -> None:
    entry = form.errors[field_name]
    if entry.error:
        st.error(entry.msg)


def text_field(form: FormController, field_name: str, label: str,
               form_name: str = "form", help: Optional[str] = None) -> str:
    """
    Render a text input bound to the raw text of a field.
    
    Args:
        form: Form controller
        field_name: Field to bind
        label: Widget label
        form_name: Name used to namespace widget keys
        help: Optional help text
        
    Returns:
        Current raw text of the field
    """
    w_key = widget_key(form_name, field_name)
    if w_key not in st.session_state:
        st.session_state[w_key] = form.p_data[field_name]
    
    st.text_input(
        label,
        key=w_key,
        help=help,
        on_change=_on_text_change,
        args=(form, field_name, w_key)
    )
    render_field_error(form, field_name)
    return form.p_data[field_name]


def checkbox_field(form: FormController, field_name: str, label: str,
                   form_name: str = "form", help: Optional[str] = None) -> bool:
    """
    Render a checkbox bound to the typed value of a boolean field.
    
    Returns:
        Current typed value of the field
    """
    w_key = widget_key(form_name, field_name)
    if w_key not in st.session_state:
        st.session_state[w_key] = bool(form.data[field_name])
    
    st.checkbox(
        label,
        key=w_key,
        help=help,
        on_change=_on_value_change,
        args=(form, field_name, w_key)
    )
    render_field_error(form, field_name)
    return bool(form.data[field_name])


def render_error_summary(form: FormController, labels: Optional[Dict[str, str]] = None) -> int:
    """
    List every failing field.
    
    Returns:
        Number of failing fields
    """
    labels = labels or {}
    failing = [(name, entry) for name, entry in form.errors.items() if entry.error]
    if failing:
        st.error("Please fix the following errors:")
        for name, entry in failing:
            st.error(f"  • {labels.get(name, name)}: {entry.msg}")
    return len(failing)


def submit_button(form: FormController, label: str = "Submit",
                  on_submit: Optional[Callable[[Dict[str, Any]], None]] = None,
                  key: Optional[str] = None,
                  labels: Optional[Dict[str, str]] = None) -> bool:
    """
    Render a submit button that validates the whole form.
    
    Args:
        form: Form controller
        label: Button label
        on_submit: Called with the typed values when the form is valid
        key: Optional widget key
        labels: Display labels for the error summary
        
    Returns:
        True if the button was pressed and the form was valid
    """
    if not st.button(label, key=key, type="primary"):
        return False
    
    if not form.validate():
        render_error_summary(form, labels)
        return False
    
    data = dict(form.data)
    if on_submit is not None:
        on_submit(data)
    st.success("✅ Form is valid")
    return True


def reset_button(form: FormController, label: str = "Reset",
                 key: Optional[str] = None) -> bool:
    """Render a button restoring typed values to the initial value."""
    if st.button(label, key=key):
        form.reset_data()
        return True
    return False
