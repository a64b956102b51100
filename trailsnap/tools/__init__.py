"""Developer tools built on the snapping engine."""
