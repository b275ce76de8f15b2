"""
Client records mirrored from backend responses and their parsers.
"""
