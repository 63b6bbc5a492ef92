"""
Manage Course page for Streamlit app (admin only).
Modules with their chapters: add, edit, delete.
"""

import streamlit as st
import pandas as pd

from academy.course_admin import CourseAdminController, ModuleForm, ChapterForm, CHAPTER_STATUSES
from streamlit_modules.ui.components import show_message, show_error, empty_state, status_badge, submit


def create_controller(manager):
    return CourseAdminController(manager.backend)


def _chapters_dataframe(chapters):
    return pd.DataFrame([
        {'Title': c.get('title', ''), 'Status': c.get('status', ''), 'Video': c.get('youtube_link', '')}
        for c in chapters
    ])


def _module_form(controller, key, module=None):
    with st.form(key, clear_on_submit=module is None):
        title = st.text_input("Module Title", value=module['title'] if module else "")
        label = "Update Module" if module else "Create Module"
        if st.form_submit_button(label, type="primary"):
            form = ModuleForm(title=title, module_id=module['id'] if module else None)
            submit(controller.save_module, form)


def _chapter_form(controller, key, form):
    module_ids = [m['id'] for m in controller.modules]
    titles = {m['id']: m['title'] for m in controller.modules}
    with st.form(key, clear_on_submit=form.chapter_id is None):
        title = st.text_input("Chapter Title", value=form.title)
        link = st.text_input("YouTube Link", value=form.youtube_link,
                             placeholder="https://www.youtube.com/watch?v=...")
        status = st.selectbox("Status", CHAPTER_STATUSES,
                              index=CHAPTER_STATUSES.index(form.status) if form.status in CHAPTER_STATUSES else 0)
        module_id = st.selectbox(
            "Module", module_ids,
            index=module_ids.index(form.module_id) if form.module_id in module_ids else 0,
            format_func=lambda module_id: titles.get(module_id, str(module_id)),
        )
        label = "Update Chapter" if form.chapter_id is not None else "Add Chapter"
        if st.form_submit_button(label, type="primary"):
            submitted = ChapterForm(title=title, youtube_link=link, status=status,
                                    module_id=module_id, chapter_id=form.chapter_id)
            submit(controller.save_chapter, submitted)


def _render_chapter(controller, chapter):
    col_title, col_edit, col_delete = st.columns([4, 1, 1])
    with col_title:
        st.markdown(f"{chapter['title']} {status_badge(chapter['status'])}", unsafe_allow_html=True)
    with col_edit:
        editing = st.toggle("Edit", key=f"edit_chapter_{chapter['id']}")
    with col_delete:
        if st.button("🗑️", key=f"delete_chapter_{chapter['id']}", help="Delete chapter"):
            submit(controller.delete_chapter, chapter['id'])
    if editing:
        _chapter_form(controller, f"chapter_form_{chapter['id']}", ChapterForm.from_chapter(chapter))


def _render_module(controller, module):
    chapters = controller.module_chapters(module['id'])
    with st.expander(f"**{module['title']}** ({len(chapters)} chapters)"):
        tab_chapters, tab_add, tab_edit = st.tabs(["Chapters", "Add Chapter", "Edit Module"])
        with tab_chapters:
            if chapters:
                st.dataframe(_chapters_dataframe(chapters), use_container_width=True, hide_index=True,
                             column_config={"Video": st.column_config.LinkColumn("Video", display_text="Open")})
                for chapter in chapters:
                    _render_chapter(controller, chapter)
            else:
                st.caption("No chapters yet")
        with tab_add:
            _chapter_form(controller, f"new_chapter_{module['id']}", ChapterForm(module_id=module['id']))
        with tab_edit:
            _module_form(controller, f"module_form_{module['id']}", module)
            confirm = st.checkbox(
                "I understand this will also delete all chapters of this module",
                key=f"confirm_delete_module_{module['id']}",
            )
            if st.button("Delete Module", key=f"delete_module_{module['id']}", disabled=not confirm):
                submit(controller.delete_module, module['id'])


def render_manage_course_page(manager, controller):
    st.title("Manage Course")

    show_error(controller.error)
    show_message(controller.message)

    with st.expander("➕ Add Module"):
        _module_form(controller, "new_module")

    if not controller.modules:
        empty_state("No modules yet. Add one to get started.")
        return

    for module in controller.modules:
        _render_module(controller, module)
