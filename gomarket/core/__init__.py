"""Core cart state, storage contract and configuration."""
