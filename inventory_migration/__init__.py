"""
Inventory Migration

Moves application inventory (tags, stakeholders, business services,
applications, dependencies, assessments and reviews) from a legacy REST
service into a newer one.

Supports:
- Export of the source inventory into per-type JSON snapshot files
- Deduplication of seed data already present in the destination
- Collision pre-check and ordered import into the destination
- Reverse-order cleanup of previously imported records
"""

__version__ = "0.1.0"
