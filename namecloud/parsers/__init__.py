"""
Response parsers.

This package contains the parser for Namecheap XML API responses.
"""
