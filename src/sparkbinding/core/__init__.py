"""Core services: configuration, checkpoint provisioning, logging."""
