"""Seed data fixtures."""
