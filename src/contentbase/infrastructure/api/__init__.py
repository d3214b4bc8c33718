"""FastAPI application exposing the ContentBase REST API."""
