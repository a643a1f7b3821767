"""Validation, composition, and tagging of deployment specifications."""
