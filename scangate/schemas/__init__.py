"""Pydantic schemas for scanner output and normalized findings."""
