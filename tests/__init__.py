"""Test suite for Net Bar."""
