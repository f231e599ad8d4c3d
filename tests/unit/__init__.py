"""Unit tests for epic-http.

External collaborators (the transport, the manifest filesystem, the
device-auth refresher) are replaced with respx routes and in-memory fakes, so
these tests need no network access, no Windows machine and no game install.
"""
