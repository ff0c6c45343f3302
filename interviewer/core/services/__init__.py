"""Application services used by the CLI and by embedding web layers."""
