"""Bill splitting engine: simple and itemized splits with service fee allocation."""
