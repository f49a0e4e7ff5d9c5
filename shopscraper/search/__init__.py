"""Search index mirror backed by Meilisearch."""
