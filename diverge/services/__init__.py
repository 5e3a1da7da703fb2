"""
Services at the edge of the session: comparing, file I/O and settings.
"""
