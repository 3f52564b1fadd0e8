"""Core types, errors, configuration and collaborator interfaces."""
