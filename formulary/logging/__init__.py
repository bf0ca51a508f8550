"""Console logging setup and the structured JSON Lines error log."""
