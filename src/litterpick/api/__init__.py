"""HTTP adapter over the LitterPick core."""
