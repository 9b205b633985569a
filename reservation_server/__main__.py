"""
Allow running the analysis server as a Python module.

Usage:
    python -m reservation_server
"""

from run_server import main

if __name__ == "__main__":
    main()
