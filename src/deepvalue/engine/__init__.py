"""Concurrent fetch pool and cancellation."""
