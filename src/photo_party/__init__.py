"""Photo guessing party game backend."""
