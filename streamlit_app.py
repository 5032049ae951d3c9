"""
Demo Streamlit application for the form state engine.
Renders a form from a YAML definition and validates it on submit.
"""

import streamlit as st
import logging

from form_state.config_loader import load_config, configure_logging, get_schema_path, get_state_prefix
from form_state.controller import FormController
from form_state.exceptions import SchemaLoadError
from form_state.schema_loader import load_form_definition, build_form_config, field_labels
from form_state.state_store import SessionStateStore
from form_state import streamlit_form

config = load_config()
configure_logging(config)
logger = logging.getLogger(__name__)

st.set_page_config(
    page_title=config['app']['name'],
    page_icon="📋",
    layout="centered"
)

FORM_NAME = "demo"


def build_controller(definition) -> FormController:
    """Create the demo controller with its state kept in session state."""
    form_config = build_form_config(definition)
    store = SessionStateStore(prefix=get_state_prefix(config, FORM_NAME))
    return FormController(form_config, store=store)


def render_form(definition) -> None:
    form = streamlit_form.get_or_create_form(FORM_NAME, lambda: build_controller(definition))
    labels = field_labels(definition)
    
    for field_name, field_config in definition['fields'].items():
        label = labels[field_name]
        if field_config.get('type') == 'boolean':
            streamlit_form.checkbox_field(form, field_name, label, form_name=FORM_NAME)
        else:
            streamlit_form.text_field(
                form, field_name, label,
                form_name=FORM_NAME,
                help=field_config.get('description')
            )
    
    col1, col2 = st.columns(2)
    with col1:
        submitted = streamlit_form.submit_button(form, labels=labels)
    with col2:
        streamlit_form.reset_button(form)
    
    if submitted:
        st.json(dict(form.data))
    
    with st.expander("🔍 Form state"):
        st.write("**data**", dict(form.data))
        st.write("**p_data**", dict(form.p_data))
        st.write("**errors**", {key: entry.model_dump() for key, entry in form.errors.items()})


def main():
    """Main application entry point."""
    schema_path = get_schema_path(config)
    st.title(config['app']['name'])
    
    try:
        definition = load_form_definition(schema_path)
    except SchemaLoadError as e:
        logger.error(f"Cannot load form definition: {e}")
        st.error(f"📋 {e.message}")
        for suggestion in e.recovery_suggestions:
            st.write(f"- {suggestion}")
        return
    
    if definition.get('title'):
        st.subheader(definition['title'])
    render_form(definition)


if __name__ == "__main__":
    main()
