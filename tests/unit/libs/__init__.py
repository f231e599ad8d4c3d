"""Tests for epic_http.libs."""
