"""Conversation Phase Service: where each subject stands in the link protocol."""
