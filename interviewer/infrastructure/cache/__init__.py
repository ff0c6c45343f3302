"""Response Cache Implementation.

In-memory cache of chat responses with a fixed TTL and lazy expiry.
Bounded Context: Cache Management
"""
