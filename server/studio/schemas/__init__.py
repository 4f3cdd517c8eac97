"""Pydantic schemas shared by the API and its client."""
