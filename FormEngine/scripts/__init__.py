"""Form Engine command line scripts."""
