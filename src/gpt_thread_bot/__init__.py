"""Slack mention bot that answers thread questions through a hosted completion service."""
