"""Click plumbing shared by the deps-order entry point."""
