"""
Data Alchemist application package.

This package contains the CSV data-cleaning tool for client, worker and
task datasets.  It includes the FastAPI backend (CSV parsing, row
validation, dataset operations and the AI assistant wrapper) and a
Streamlit frontend that talks to the backend over HTTP.

Settings are read from environment variables.  A ``.env`` file in the
working directory is loaded when the package is imported so that module
level settings such as ``AI_MODEL`` pick it up.
"""

from dotenv import load_dotenv

load_dotenv()
