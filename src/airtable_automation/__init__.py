"""Task host for the Airtable records automation kit."""

__all__ = [
    "engine",
    "contract",
    "credentials",
]
