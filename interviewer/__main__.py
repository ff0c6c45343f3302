"""Main entry point when executing interviewer as a package.

This allows running the package using python -m interviewer.
"""

from interviewer.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
