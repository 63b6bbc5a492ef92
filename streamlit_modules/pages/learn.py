"""
Learn page for Streamlit app.
Module selector, video player and chapter list.
"""

import streamlit as st
import streamlit.components.v1 as components

from academy.learn import LearnController
from streamlit_modules.ui.components import show_error, empty_state

PLAYER_HEIGHT = 450


def create_controller(manager):
    return LearnController(manager.backend)


def render_learn_page(manager, controller):
    st.title("Learn")

    modules = controller.modules
    if modules:
        ids = [m['id'] for m in modules]
        titles = {m['id']: m['title'] for m in modules}
        current = controller.selected_module['id'] if controller.selected_module else ids[0]
        chosen = st.selectbox(
            "Select Module",
            ids,
            index=ids.index(current) if current in ids else 0,
            format_func=lambda module_id: titles.get(module_id, str(module_id)),
            disabled=controller.loading,
        )
        if controller.selected_module is None or chosen != controller.selected_module['id']:
            controller.select_module(chosen)
    else:
        st.selectbox("Select Module", ["No modules available"], disabled=True)

    show_error(controller.error)

    col_video, col_list = st.columns([2, 1])
    with col_video:
        chapter = controller.selected_chapter
        video_url = controller.video_url
        if chapter is not None and video_url:
            components.iframe(video_url, height=PLAYER_HEIGHT)
            st.subheader(chapter['title'])
            st.caption(controller.selected_module['title'] if controller.selected_module else "")
        elif chapter is not None:
            empty_state("This chapter has no playable video")
        else:
            empty_state(controller.empty_text)

    with col_list:
        st.markdown("**Chapters**")
        if not controller.chapters:
            st.caption("No chapters available")
        for item in controller.chapters:
            selected = controller.selected_chapter is not None and controller.selected_chapter['id'] == item['id']
            if st.button(
                item['title'],
                key=f"chapter_{item['id']}",
                type="primary" if selected else "secondary",
                use_container_width=True,
            ):
                controller.select_chapter(item['id'])
                st.rerun()
