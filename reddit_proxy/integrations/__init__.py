"""Clients for the upstream services the proxy forwards to."""
