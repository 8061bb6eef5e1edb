"""
Firestore access layer.

Responsibilities:
- Build the async Firestore client once at startup.
- Read whole collections as ``{"id": ..., **fields}`` records.
- Run the single ranked query behind the popular-items endpoint.
"""
