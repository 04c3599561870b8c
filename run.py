#!/usr/bin/env python3
"""
CROCO DODGE Launcher
=====================
Run this script to start the game.
"""

from croco_dodge.main import main

if __name__ == "__main__":
    main()
