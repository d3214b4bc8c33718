"""Infrastructure layer: persistence, HTTP API, API client and storage."""
