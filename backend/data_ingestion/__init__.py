"""
Collection seeding package.

Responsibilities:
- Read menu item or place exports from CSV.
- Normalize ratings and coordinates into the shape the API reads.
- Write the rows into a Firestore collection in batches.
"""
