"""A small shop service used by the documentation tests."""
