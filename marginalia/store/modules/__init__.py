"""Store modules composed into the sidebar store."""
