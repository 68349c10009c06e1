"""idlease HTTP client and CLI."""
