"""Prepare scaffolder templates by checking out their source repositories."""

__version__ = "0.1.0"
