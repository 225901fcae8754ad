"""Service layer: certificate store access and the renewal protocol."""
