"""Application services orchestrating domain objects and repositories."""
