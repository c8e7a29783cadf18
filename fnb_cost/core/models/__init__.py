"""Core models: domain enums and permissions plus API I/O schemas."""
