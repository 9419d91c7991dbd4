import pytest

from src.core.errors import UpstreamServiceError
from tests.support.stubs import FakeSpotifyClient, make_track

DUNE = {'bookTitle': 'Dune', 'bookAuthor': 'Frank Herbert'}


def _cookie(resp, name):
    for header in resp.headers.getlist('Set-Cookie'):
        if header.startswith(f'{name}='):
            return header
    return None


def _is_cleared(header):
    return header is not None and ('Max-Age=0' in header or '01 Jan 1970' in header)


@pytest.mark.unit
def test_playlist_without_login_returns_genre_fallback(client, fake_spotify):
    r = client.post('/api/playlist', json={'bookTitle': 'Dune', 'bookGenre': 'sci-fi'})

    assert r.status_code == 200
    body = r.get_json()
    assert body['playlistId'] is None
    assert body['source'] == 'fallback'
    assert body['name'] == 'Bookify: Dune'
    assert [t['name'] for t in body['tracks'][:2]] == ['Space Odyssey', 'Cyberpunk Streets']
    assert 'tags' not in body['tracks'][0]
    assert fake_spotify.searched == []


@pytest.mark.unit
def test_playlist_requires_title(client):
    r = client.post('/api/playlist', json={'bookAuthor': 'Frank Herbert'})
    assert r.status_code == 400
    assert r.get_json() == {'error': 'Book title is required'}


@pytest.mark.unit
def test_playlist_with_login_creates_in_account(client, fake_spotify):
    fake_spotify.tracks_by_query = {'Dune Frank Herbert': [make_track('a'), make_track('b')]}
    client.set_cookie('spotify_access_token', 'tok')

    r = client.post('/api/playlist', json=DUNE)

    body = r.get_json()
    assert r.status_code == 200
    assert body['playlistId'] == 'pl-1'
    assert body['source'] == 'spotify'
    assert fake_spotify.added == [('pl-1', ['spotify:track:a', 'spotify:track:b'])]


@pytest.mark.unit
def test_expired_token_is_refreshed_and_retried(app, client, fake_spotify, fake_auth):
    expired = FakeSpotifyClient(expired=True)
    fake_spotify.tracks_by_query = {'Dune Frank Herbert': [make_track('a')]}
    app.extensions['spotify_client_factory'] = (
        lambda token: fake_spotify if token == 'new-access' else expired
    )
    client.set_cookie('spotify_access_token', 'old-access')
    client.set_cookie('spotify_refresh_token', 'old-refresh')

    r = client.post('/api/create-playlist', json=DUNE)

    assert r.status_code == 200
    assert r.get_json()['playlistId'] == 'pl-1'
    assert fake_auth.refreshed == ['old-refresh']
    assert _cookie(r, 'spotify_access_token').startswith('spotify_access_token=new-access')


@pytest.mark.unit
def test_playlist_with_dead_session_degrades_to_suggestion(app, client):
    app.extensions['spotify_client_factory'] = lambda token: FakeSpotifyClient(expired=True)
    client.set_cookie('spotify_access_token', 'dead')

    r = client.post('/api/playlist', json=DUNE)

    assert r.status_code == 200
    assert r.get_json()['playlistId'] is None
    assert _is_cleared(_cookie(r, 'spotify_access_token'))


@pytest.mark.unit
def test_create_playlist_requires_login(client):
    r = client.post('/api/create-playlist', json=DUNE)
    assert r.status_code == 401
    assert r.get_json() == {'error': 'Not authenticated with Spotify'}

    client.set_cookie('spotify_refresh_token', 'rt')
    r = client.post('/api/create-playlist', json=DUNE)
    assert r.status_code == 401
    assert r.get_json()['needsRefresh'] is True


@pytest.mark.unit
def test_create_playlist_expired_without_refresh_token(app, client):
    app.extensions['spotify_client_factory'] = lambda token: FakeSpotifyClient(expired=True)
    client.set_cookie('spotify_access_token', 'dead')

    r = client.post('/api/create-playlist', json=DUNE)

    assert r.status_code == 401
    assert r.get_json() == {'error': 'Spotify token expired', 'needsRefresh': True}


@pytest.mark.unit
def test_create_playlist_refresh_failure_clears_session(app, client, fake_auth):
    fake_auth.error = UpstreamServiceError('Failed to refresh token', service='spotify_accounts', status_code=400)
    app.extensions['spotify_client_factory'] = lambda token: FakeSpotifyClient(expired=True)
    client.set_cookie('spotify_access_token', 'dead')
    client.set_cookie('spotify_refresh_token', 'revoked')

    r = client.post('/api/create-playlist', json=DUNE)

    assert r.status_code == 401
    assert r.get_json() == {'error': 'Spotify session expired; please log in again'}
    assert _is_cleared(_cookie(r, 'spotify_refresh_token'))


@pytest.mark.unit
def test_suggest_tracks_is_display_only(client, fake_spotify):
    client.set_cookie('spotify_access_token', 'tok')
    r = client.post('/api/suggest-tracks', json={'title': 'Gone Girl', 'genre': 'Thriller'})
    body = r.get_json()
    assert r.status_code == 200
    assert body['source'] == 'fallback'
    assert body['tracks'][0]['name'] == 'Suspense'
    assert fake_spotify.searched == []


@pytest.mark.unit
def test_verify_playlist(client, fake_spotify):
    assert client.get('/api/verify-playlist').status_code == 400
    assert client.get('/api/verify-playlist?id=pl-9').status_code == 401

    fake_spotify.existing_playlists = {'pl-9'}
    client.set_cookie('spotify_access_token', 'tok')
    assert client.get('/api/verify-playlist?id=pl-9').get_json() == {'exists': True}
    assert client.get('/api/verify-playlist?id=pl-0').get_json() == {'exists': False}


@pytest.mark.unit
def test_save_playlist_follows(client, fake_spotify):
    r = client.post('/api/save-playlist', json={})
    assert r.status_code == 400

    r = client.post('/api/save-playlist', json={'playlistId': 'pl-9'})
    assert r.status_code == 401

    client.set_cookie('spotify_access_token', 'tok')
    r = client.post('/api/save-playlist', json={'playlistId': 'pl-9'})
    assert r.get_json() == {'success': True}
    assert fake_spotify.followed == ['pl-9']


@pytest.mark.unit
def test_playlist_falls_back_when_spotify_rejects_creation(app, client):
    forbidden = UpstreamServiceError(
        'Spotify API error during playlist creation', service='spotify', status_code=403
    )
    app.extensions['spotify_client_factory'] = (
        lambda token: FakeSpotifyClient(
            tracks_by_query={'Dune Frank Herbert': [make_track('a')]},
            create_error=forbidden,
        )
    )
    client.set_cookie('spotify_access_token', 'tok')

    r = client.post('/api/playlist', json=dict(DUNE, bookGenre='sci-fi'))

    assert r.status_code == 200
    body = r.get_json()
    assert body['playlistId'] is None
    assert body['source'] == 'fallback'
    assert [t['name'] for t in body['tracks'][:2]] == ['Space Odyssey', 'Cyberpunk Streets']
    assert _cookie(r, 'spotify_access_token') is None


@pytest.mark.unit
def test_playlist_fallback_keeps_refreshed_tokens(app, client, fake_auth):
    expired = FakeSpotifyClient(expired=True)
    unavailable = FakeSpotifyClient(
        tracks_by_query={'Dune Frank Herbert': [make_track('a')]},
        create_error=UpstreamServiceError('Spotify unavailable', service='spotify', status_code=503)
    )
    app.extensions['spotify_client_factory'] = (
        lambda token: unavailable if token == 'new-access' else expired
    )
    client.set_cookie('spotify_access_token', 'old-access')
    client.set_cookie('spotify_refresh_token', 'old-refresh')

    r = client.post('/api/playlist', json=DUNE)

    assert r.status_code == 200
    assert r.get_json()['playlistId'] is None
    assert r.get_json()['tracks']
    assert fake_auth.refreshed == ['old-refresh']
    assert _cookie(r, 'spotify_access_token').startswith('spotify_access_token=new-access')


@pytest.mark.unit
def test_create_playlist_error_after_refresh_keeps_new_tokens(app, client, fake_auth):
    expired = FakeSpotifyClient(expired=True)
    forbidden = FakeSpotifyClient(
        tracks_by_query={'Dune Frank Herbert': [make_track('a')]},
        create_error=UpstreamServiceError('Insufficient scope', service='spotify', status_code=403)
    )
    app.extensions['spotify_client_factory'] = (
        lambda token: forbidden if token == 'new-access' else expired
    )
    client.set_cookie('spotify_access_token', 'old-access')
    client.set_cookie('spotify_refresh_token', 'old-refresh')

    r = client.post('/api/create-playlist', json=DUNE)

    assert r.status_code == 403
    assert r.get_json() == {'error': 'Insufficient scope'}
    assert _cookie(r, 'spotify_access_token').startswith('spotify_access_token=new-access')


@pytest.mark.unit
def test_playlist_falls_back_when_profile_lookup_fails(app, client):
    app.extensions['spotify_client_factory'] = lambda token: FakeSpotifyClient(user={})
    client.set_cookie('spotify_access_token', 'tok')

    r = client.post('/api/playlist', json=DUNE)

    assert r.status_code == 200
    assert r.get_json()['playlistId'] is None
    assert r.get_json()['tracks']
    assert not _is_cleared(_cookie(r, 'spotify_access_token'))
