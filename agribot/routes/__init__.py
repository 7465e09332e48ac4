"""Streamlit UI (request handler) for the chat."""
