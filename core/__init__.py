"""Process-wide helpers shared by the server and the CLI."""
