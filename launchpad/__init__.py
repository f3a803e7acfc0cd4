"""Launchpad: backend for a dashboard over Vercel projects and GitHub files."""

__version__ = "0.1.0"
