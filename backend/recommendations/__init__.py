"""
Menu recommendation package.

Responsibilities:
- Typed views over the schema-less menu and place records.
- Resolve a query or meal type into at most five menu items.
- Compute the distance between a user and a place.
"""
