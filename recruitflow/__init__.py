"""Candidate pipeline stage engine and client lifecycle service."""
