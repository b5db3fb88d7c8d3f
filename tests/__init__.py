"""Tests for the EigenTrust circuits and their building blocks."""
