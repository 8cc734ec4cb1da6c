"""Entry point for 'python -m pbmigrate' command.

This module allows the pbmigrate CLI to be invoked using
'python -m pbmigrate migrate up'.
"""

from pbmigrate.cli import main

if __name__ == "__main__":
    main()
