"""Hospital administration core: domain store, derived views, billing and auth."""
