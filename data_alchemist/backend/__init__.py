"""
Backend package for the Data Alchemist application.

Contains the CSV parsers, row validators, dataset operations, the AI
assistant wrapper and the FastAPI server exposing them.
"""
