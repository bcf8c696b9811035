"""
Worker - the storage data plane

Holds file bytes in two tiers: the under-storage root (authoritative copy)
and a local cache tier, and serves them to clients over the TCP data protocol.
"""
