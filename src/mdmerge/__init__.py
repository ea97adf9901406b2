"""Merge pipe tables embedded in Markdown documents."""
