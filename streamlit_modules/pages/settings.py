"""
Settings page for Streamlit app.
Profile name, email and password.
"""

import streamlit as st

from academy.profile import SettingsController, SettingsForm
from streamlit_modules.ui.components import show_message


def create_controller(manager):
    return SettingsController(manager)


def render_settings_page(manager, controller):
    st.title("Settings")
    st.subheader("Profile Settings")

    show_message(controller.message)

    current = controller.form
    with st.form("settings_form"):
        name = st.text_input("Name", value=current.name)
        email = st.text_input("Email", value=current.email)
        password = st.text_input("New Password", type="password",
                                 placeholder="Leave blank to keep current password")
        confirm_password = st.text_input("Confirm New Password", type="password",
                                         placeholder="Leave blank to keep current password")
        submitted = st.form_submit_button("Save Changes", type="primary", disabled=controller.loading)

    if submitted:
        form = SettingsForm(name=name, email=email, password=password, confirm_password=confirm_password)
        with st.spinner("Saving..."):
            controller.submit(form)
        st.rerun()
