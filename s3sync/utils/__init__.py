"""
s3sync Utilities

Logging setup and file helpers.

Author: s3sync Project
License: MIT
"""
