"""Game modules: shared foundations and the progression feature."""
