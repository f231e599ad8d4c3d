"""Tests for epic-http; everything under ``tests/unit`` runs offline."""
