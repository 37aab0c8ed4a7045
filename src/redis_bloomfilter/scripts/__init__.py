"""Lua sources for the atomic driver."""
