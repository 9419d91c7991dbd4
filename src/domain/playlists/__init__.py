"""Playlist generation from book details."""

from .generator import PlaylistGenerator, playlist_description, playlist_name

__all__ = ["PlaylistGenerator", "playlist_description", "playlist_name"]
