"""Core domain package for chatdigest.

Core contains buffering, rule matching, classification, and summary rendering
without any Telegram or storage-specific code, keeping the summarizer portable.
"""
