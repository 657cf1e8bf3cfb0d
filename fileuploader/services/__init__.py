"""Business logic: authentication core and file store."""
