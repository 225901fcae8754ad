"""Core configuration."""
