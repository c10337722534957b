"""Feed fetching, caching, persistence and polling."""
