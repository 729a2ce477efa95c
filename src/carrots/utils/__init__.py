"""Utility helpers for carrots."""
