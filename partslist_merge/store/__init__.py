"""Document store interfaces and the local filesystem store."""
