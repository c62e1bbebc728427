"""Streamlit frontend and launcher for the Data Alchemist application."""
