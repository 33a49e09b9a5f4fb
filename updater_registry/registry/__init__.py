"""Registry — the directory-backed store of updater registrations.

The registry provides:
- Creation: persist a validated descriptor under its store key
- Lookup: read one registration or enumerate all of them as summaries
- Removal: delete a registration and its directory
- Collision checks against an external name registry
"""
