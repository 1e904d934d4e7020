"""Integrations subpackage for byaml-xml.

Contains the pytest plugin, auto-discovered via the pytest11 entry point.
"""
