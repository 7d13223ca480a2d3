"""
Entry point for python -m project_version

Allows running the package as a module:
    python -m project_version show
"""

from .cli import main

if __name__ == '__main__':
    main()
