"""Terminal client: one-shot note commands and an interactive shell."""
