"""toolproc entry point.

Supports: python -m toolproc
"""

from .app import main

if __name__ == "__main__":
    main()
