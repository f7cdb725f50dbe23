"""
Persistence adapters.

``JsonStorage`` owns one JSON document and its in-memory copy; ``Repository``
layers identifier, uniqueness and query rules on top of it. Callers should go
through Repository rather than touching the JSON file.
"""
