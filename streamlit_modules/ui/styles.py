import streamlit as st

def apply_custom_css():
    st.markdown("""
    <style>
        .main-header {
            font-size: 2rem;
            font-weight: 700;
            color: #4f46e5;
            margin-bottom: 0.25rem;
        }
        .sub-header {
            font-size: 0.9rem;
            color: #666;
            margin-bottom: 1.5rem;
        }
        .status-badge {
            padding: 0.15rem 0.6rem;
            border-radius: 1rem;
            font-size: 0.8rem;
            display: inline-block;
        }
        .status-live {
            background-color: #d4edda;
            color: #155724;
        }
        .status-draft {
            background-color: #f0f2f6;
            color: #666;
        }
        .empty-state {
            padding: 3rem 1rem;
            text-align: center;
            color: #888;
            background-color: #fafafa;
            border-radius: 0.5rem;
        }
    </style>
    """, unsafe_allow_html=True)
