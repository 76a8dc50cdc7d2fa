"""
Main entry point when running the path_tracker module with python -m.
"""

from .client import run

if __name__ == "__main__":
    run()
