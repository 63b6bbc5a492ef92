import streamlit as st


def show_message(message):
    """Show a controller message as a success or error box"""
    if not message:
        return
    if message.kind == 'error':
        st.error(message.text)
    else:
        st.success(message.text)


def show_error(error):
    if error:
        st.error(error)


def status_badge(status):
    """Small coloured badge for a chapter status"""
    css = 'status-live' if status == 'live' else 'status-draft'
    return f'<span class="status-badge {css}">{status}</span>'


def empty_state(text):
    st.markdown(f'<div class="empty-state">{text}</div>', unsafe_allow_html=True)


def render_loading_screen(app_name):
    """Shown until the first session check has finished"""
    st.markdown(f'<div class="empty-state">⏳ Loading {app_name}...</div>', unsafe_allow_html=True)


def submit(action, *args):
    """Run a controller action, then rerun so its message shows on top of the page"""
    result = action(*args)
    st.rerun()
    return result
