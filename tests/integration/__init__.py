"""Integration tests for calico_upgrade."""
