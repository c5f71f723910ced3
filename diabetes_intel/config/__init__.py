"""Settings, logging setup and the static feed registry."""
