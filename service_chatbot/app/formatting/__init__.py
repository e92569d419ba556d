"""
Chat-line formatting for the chat gateway routes.
"""
