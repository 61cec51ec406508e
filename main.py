#!/usr/bin/env python3
"""
namecloud - Main Entry Point

This is the main entry point for namecloud.
It can be run directly or imported as a module.
"""

from namecloud.cli.main import main

if __name__ == "__main__":
    main()
