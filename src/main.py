#!/usr/bin/env python3
"""
Switchboard oracle client for Aptos
Entry point: python -m src.main <command>
"""
from .cli import main

if __name__ == "__main__":
    main()
