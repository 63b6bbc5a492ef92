"""
Page modules for Streamlit app.
Each module contains the render function and controller factory for one route.
"""
