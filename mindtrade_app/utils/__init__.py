"""
Utility functions module.

Common helpers for parsing and formatting backend timestamps.

Time Semantics:
- Backend timestamps are ISO8601 and treated as UTC when no offset is given
- "Today" always means the local calendar day of the user running the client
- Dates sent back to the backend are plain YYYY-MM-DD strings
"""
