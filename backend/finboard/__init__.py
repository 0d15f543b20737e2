"""Finboard: personal finance dashboard API."""
