"""Feature modules of the Habitat application."""
