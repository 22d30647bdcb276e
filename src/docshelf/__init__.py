"""docshelf — upload files over HTTP, derive extracts/thumbnails/labels, search them."""
