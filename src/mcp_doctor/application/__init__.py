"""Probe registry, runner and report generation."""
