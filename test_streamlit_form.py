"""
Unit tests for the Streamlit form bindings.
"""

import pytest
from unittest.mock import patch, MagicMock

from form_state import streamlit_form
from form_state.controller import FormController, create_form
from form_state.parsers import integer_parser, string_parser
from form_state.schema import FieldError, Validation
from form_state.schema_loader import build_form_config


class MockSessionState(dict):
    def __setattr__(self, key, value):
        self[key] = value
    
    def __getattr__(self, key):
        try:
            return self[key]
        except KeyError:
            raise AttributeError(f"'{type(self).__name__}' object has no attribute '{key}'")


@pytest.fixture
def mock_streamlit_environment():
    """Mock the Streamlit calls used by the bindings."""
    mock_state = MockSessionState()
    
    with patch('streamlit.session_state', mock_state), \
         patch('streamlit.text_input') as mock_text_input, \
         patch('streamlit.checkbox') as mock_checkbox, \
         patch('streamlit.button') as mock_button, \
         patch('streamlit.error') as mock_error, \
         patch('streamlit.success') as mock_success:
        
        yield {
            'session_state': mock_state,
            'text_input': mock_text_input,
            'checkbox': mock_checkbox,
            'button': mock_button,
            'error': mock_error,
            'success': mock_success
        }


def make_form():
    return create_form(
        {'age': [Validation(validator=lambda v: v >= 18, msg="too young")]},
        {'age': 20, 'name': 'Ada', 'subscribed': False},
        {'age': integer_parser(), 'name': string_parser, 'subscribed': string_parser},
    )


class TestGetOrCreateForm:
    """Test controller persistence across reruns."""
    
    def test_factory_runs_once(self, mock_streamlit_environment):
        factory = MagicMock(side_effect=make_form)
        
        first = streamlit_form.get_or_create_form('signup', factory)
        second = streamlit_form.get_or_create_form('signup', factory)
        
        assert first is second
        factory.assert_called_once()
    
    def test_discard_form(self, mock_streamlit_environment):
        state = mock_streamlit_environment['session_state']
        streamlit_form.get_or_create_form('signup', make_form)
        state[streamlit_form.widget_key('signup', 'age')] = '30'
        
        streamlit_form.discard_form('signup')
        
        assert dict(state) == {}


class TestTextField:
    """Test text inputs bound to raw text."""
    
    def test_seeds_widget_and_wires_callback(self, mock_streamlit_environment):
        env = mock_streamlit_environment
        form = make_form()
        
        value = streamlit_form.text_field(form, 'age', "Age", form_name='signup')
        
        w_key = streamlit_form.widget_key('signup', 'age')
        assert value == '20'
        assert env['session_state'][w_key] == '20'
        kwargs = env['text_input'].call_args.kwargs
        assert kwargs['key'] == w_key
        assert kwargs['args'] == (form, 'age', w_key)
        env['error'].assert_not_called()
    
    def test_callback_forwards_text(self, mock_streamlit_environment):
        env = mock_streamlit_environment
        form = make_form()
        streamlit_form.text_field(form, 'age', "Age", form_name='signup')
        kwargs = env['text_input'].call_args.kwargs
        
        env['session_state'][kwargs['key']] = '15'
        kwargs['on_change'](*kwargs['args'])
        
        assert form.p_data['age'] == '15'
        assert form.errors['age'] == FieldError.failed("too young")
    
    def test_renders_field_error(self, mock_streamlit_environment):
        env = mock_streamlit_environment
        form = make_form()
        form.handle_change('age', '12')
        
        streamlit_form.text_field(form, 'age', "Age")
        
        env['error'].assert_called_once_with("too young")


class TestCheckboxField:
    """Test checkboxes bound to typed values."""
    
    def test_callback_commits_typed_value(self, mock_streamlit_environment):
        env = mock_streamlit_environment
        form = make_form()
        
        assert streamlit_form.checkbox_field(form, 'subscribed', "Subscribe") is False
        kwargs = env['checkbox'].call_args.kwargs
        
        env['session_state'][kwargs['key']] = True
        kwargs['on_change'](*kwargs['args'])
        
        assert form.data['subscribed'] is True
        assert form.p_data['subscribed'] == 'true'


class TestSubmitButton:
    """Test whole-form submission."""
    
    def test_not_pressed(self, mock_streamlit_environment):
        mock_streamlit_environment['button'].return_value = False
        on_submit = MagicMock()
        
        assert streamlit_form.submit_button(make_form(), on_submit=on_submit) is False
        on_submit.assert_not_called()
    
    def test_valid_form_is_submitted(self, mock_streamlit_environment):
        env = mock_streamlit_environment
        env['button'].return_value = True
        form = make_form()
        form.handle_change('age', '42')
        on_submit = MagicMock()
        
        assert streamlit_form.submit_button(form, on_submit=on_submit) is True
        
        on_submit.assert_called_once_with({'age': 42, 'name': 'Ada', 'subscribed': False})
        env['success'].assert_called_once()
    
    def test_invalid_form_lists_errors(self, mock_streamlit_environment):
        env = mock_streamlit_environment
        env['button'].return_value = True
        form = make_form()
        form.handle_change('age', '3')
        on_submit = MagicMock()
        
        assert streamlit_form.submit_button(form, on_submit=on_submit, labels={'age': 'Age'}) is False
        
        on_submit.assert_not_called()
        env['error'].assert_any_call("  • Age: too young")
    
    def test_ticked_checkbox_survives_validation(self, mock_streamlit_environment):
        """A checkbox edit reaches the raw text, so validate() keeps the ticked value."""
        env = mock_streamlit_environment
        form = FormController(build_form_config(
            {'fields': {'agree': {'type': 'boolean', 'required': True}}}
        ))
        streamlit_form.checkbox_field(form, 'agree', "I agree")
        kwargs = env['checkbox'].call_args.kwargs
        env['session_state'][kwargs['key']] = True
        kwargs['on_change'](*kwargs['args'])
        env['button'].return_value = True
        on_submit = MagicMock()
        
        assert streamlit_form.submit_button(form, on_submit=on_submit) is True
        
        on_submit.assert_called_once_with({'agree': True})
        assert form.p_data['agree'] == 'true'


class TestResetButton:
    """Test the reset button."""
    
    def test_reset_restores_data(self, mock_streamlit_environment):
        mock_streamlit_environment['button'].return_value = True
        form = make_form()
        form.handle_data_change('age', 50)
        
        assert streamlit_form.reset_button(form) is True
        assert form.data['age'] == 20
