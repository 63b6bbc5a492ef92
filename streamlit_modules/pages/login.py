"""
Login page for Streamlit app.
"""

import logging
import streamlit as st

from streamlit_modules.session import navigate

logger = logging.getLogger(__name__)


def render_login_page(manager, controller=None):
    """Render the email/password login form"""
    st.markdown('<p class="main-header">🎓 Zen Academy</p>', unsafe_allow_html=True)
    st.markdown('<p class="sub-header">Sign in to continue learning</p>', unsafe_allow_html=True)

    _, col, _ = st.columns([1, 2, 1])
    with col:
        with st.form("login_form"):
            email = st.text_input("Email", placeholder="you@example.com")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Login", type="primary", use_container_width=True)

        if submitted:
            if not email or not password:
                st.warning("Enter email and password")
                return
            with st.spinner("Logging in..."):
                error = manager.login(email, password)
            if error is not None:
                st.error(f"✗ {error}")
            else:
                logger.info("Login successful")
                navigate('/')
