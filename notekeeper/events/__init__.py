"""Operation notifications published by the note state manager."""
