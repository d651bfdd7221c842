"""Remote user search: HTTP client and dataset server."""
