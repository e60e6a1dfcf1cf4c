"""Packaged SQL migrations (*.up.sql), applied in lexicographic order."""
