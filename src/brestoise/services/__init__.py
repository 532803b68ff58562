"""Business logic for each endpoint, independent of the HTTP layer."""
