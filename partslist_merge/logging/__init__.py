"""Console logging setup and the skipped-document log."""
