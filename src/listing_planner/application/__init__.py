"""Application layer – listing query planning and pagination."""
