"""Core pipeline primitives: configuration, channels, stage status, orchestration."""
