"""bulkops command line interface."""
