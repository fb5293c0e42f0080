# blockpilot/__main__.py
# AI-Mind (C) 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""CLI entrypoint for running the chat command agent.

Usage:
    python -m blockpilot --owner Alice

See blockpilot.utils for the available options.
"""

from .utils import main

if __name__ == "__main__":
    main()
