"""Updater registration manager.

Validates updater descriptors and manages their registrations in a
directory-backed store.
"""

__version__ = "0.1.0"
