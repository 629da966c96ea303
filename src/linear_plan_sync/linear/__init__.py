"""Linear API access and mirror issue handling."""
