"""Infrastructure layer: SQL building and database access helpers."""
