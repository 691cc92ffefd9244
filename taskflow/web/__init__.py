"""WEB API for taskflow."""
