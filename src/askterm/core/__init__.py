"""Core modules for askterm: config, launch resolution, sessions, services."""
