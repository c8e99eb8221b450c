"""Web server for the repository page."""
