"""
Manage Users page for Streamlit app (admin only).
"""

import streamlit as st
import pandas as pd

from academy.user_admin import UserAdminController, UserForm, ROLES
from streamlit_modules.ui.components import show_message, show_error, empty_state, submit


def create_controller(manager):
    return UserAdminController(manager.backend, manager.auth)


def _user_form(controller, key, form):
    editing = form.user_id is not None
    with st.form(key, clear_on_submit=not editing):
        name = st.text_input("Name", value=form.name)
        email = st.text_input("Email", value=form.email)
        password = st.text_input(
            "Password", type="password",
            placeholder="Leave blank to keep current password" if editing else "",
        )
        role = st.selectbox("Role", ROLES, index=ROLES.index(form.role) if form.role in ROLES else 0)
        label = "Update User" if editing else "Create User"
        if st.form_submit_button(label, type="primary"):
            submitted = UserForm(name=name, email=email, password=password, role=role, user_id=form.user_id)
            submit(controller.save_user, submitted)


def render_manage_users_page(manager, controller):
    st.title("Manage Users")

    show_error(controller.error)
    show_message(controller.message)

    with st.expander("➕ Add User"):
        _user_form(controller, "new_user", UserForm())

    if not controller.users:
        empty_state("No users found")
        return

    df = pd.DataFrame([
        {'Name': u.get('name', ''), 'Email': u.get('email', ''), 'Role': u.get('role', '')}
        for u in controller.users
    ])
    st.dataframe(df, use_container_width=True, hide_index=True)

    ids = [u['id'] for u in controller.users]
    labels = {u['id']: f"{u.get('name', '')} ({u.get('email', '')})" for u in controller.users}
    selected = st.selectbox("Select user", ids, format_func=lambda user_id: labels.get(user_id, user_id))
    user = controller.find(selected)
    if user is None:
        return

    st.subheader("Edit User")
    _user_form(controller, f"user_form_{selected}", UserForm.from_user(user))

    own_account = selected == manager.state.user_id
    confirm = st.checkbox("Confirm deletion", key=f"confirm_delete_user_{selected}", disabled=own_account)
    if st.button("Delete User", key=f"delete_user_{selected}", disabled=own_account or not confirm):
        submit(controller.delete_user, selected)
    if own_account:
        st.caption("You cannot delete your own account")
