"""docshelf command-line interface."""
