"""Core workflows: revision parsing, repo resolution, closure, plans and sync."""
