"""Task and hideout dependency resolution for game progress tracking."""
