"""
FileDrop

Temporary file sharing service: upload a file, get a time-limited download
link, list uploads, and purge expired files.
"""

__version__ = "1.0.0"
