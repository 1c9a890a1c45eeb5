"""
Bikewatch - Streamlit GUI Application

This module provides the Streamlit-based web interface showing bike-share
station traffic over the bike lane network, with a time-of-day filter.

Run with:
    streamlit run app.py
"""

import logging
import streamlit as st

from bikewatch.maps.maps_page import render_maps_page

logging.basicConfig(level=logging.INFO)

# Configure Streamlit page
st.set_page_config(
    page_title="Bikewatch",
    page_icon="🚲",
    layout="wide",
    initial_sidebar_state="collapsed"
)


def main():
    """Main application entry point"""
    render_maps_page()


if __name__ == "__main__":
    main()
