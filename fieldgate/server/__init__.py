"""FastAPI server adapter."""
