"""Streamlit front end for session prep.

Run with:
    streamlit run src/tabletop_prep/ui/app.py
"""
