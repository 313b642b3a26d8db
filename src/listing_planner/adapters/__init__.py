"""Adapters – storage and HTTP edges around the planner."""
