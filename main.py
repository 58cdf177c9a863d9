#!/usr/bin/env python3
"""Main entry point for holidate."""

from holidate.cli import cli

if __name__ == '__main__':
    cli()
