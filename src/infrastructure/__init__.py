"""Outbound clients for Google Books, Spotify and OpenAI."""

from .google_books import GoogleBooksClient
from .llm import BookCurator, template_description
from .spotify_api import SpotifyUserClient, default_client_factory
from .spotify_auth import SpotifyAuthClient, make_code_challenge, make_code_verifier, make_state

__all__ = [
    "GoogleBooksClient",
    "BookCurator",
    "template_description",
    "SpotifyUserClient",
    "default_client_factory",
    "SpotifyAuthClient",
    "make_code_challenge",
    "make_code_verifier",
    "make_state",
]
