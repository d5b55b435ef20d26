"""
Run lohr as a module.

Usage:
    python -m lohr serve
    python -m lohr serve --port 8000 --home /srv/mirrors
"""

from .main import main


if __name__ == "__main__":
    main()
