"""Adapters for talking to the server under diagnosis."""
