"""Textual front end for browsing the vstorage tree."""
