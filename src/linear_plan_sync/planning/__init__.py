"""Plan file discovery and ticket identifier extraction from git."""
