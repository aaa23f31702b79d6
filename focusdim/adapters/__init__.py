"""Window manager adapters: socket discovery and IPC backends."""
