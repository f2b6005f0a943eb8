"""Process-wide helpers shared by the app layer."""
