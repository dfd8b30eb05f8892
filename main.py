#!/usr/bin/env python3
"""API Connector Generator - Entry point."""
from connector_generator.cli.commands import cli

if __name__ == "__main__":
    cli()
