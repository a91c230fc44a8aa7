"""Buffer editing, input routing and autosave."""
