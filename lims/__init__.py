"""Laboratory record listing backend."""
