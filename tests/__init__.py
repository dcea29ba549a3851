"""Tests for claimbench."""
