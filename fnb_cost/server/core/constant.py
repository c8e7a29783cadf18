"""Application-wide constants for the HTTP server."""

PROJECT_NAME = "fnb-cost"
API_V1_STR = "/api/v1"
VERSION = "0.1.0"
SCHEMA_VERSION = "v1"
