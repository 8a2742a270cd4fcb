"""Core channel directory: store access, loading, refresh, resolution, publishing, auth."""
