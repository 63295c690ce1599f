"""Tests for iterative-research."""
