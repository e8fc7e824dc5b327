"""UI subpackage - Streamlit front end."""
