"""HTTP API -- read-only market listing and create-bond preparation."""
