"""Keeper command line interface."""
