"""Domain helpers: record models, identifier rules and the query language."""
