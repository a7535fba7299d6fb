#!/usr/bin/env python3
"""
Main entry point for the C0deC0re chat bot
"""

from codecore_bot.main import run

if __name__ == "__main__":
    run()
