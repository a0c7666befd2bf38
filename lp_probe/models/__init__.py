"""Probe data models."""
