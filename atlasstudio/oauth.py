"""
OAuth 2.0 client registry.

Providers registered here are reachable under
/oauth2/authorization/{name} and /login/oauth2/code/{name}.
"""
from authlib.integrations.starlette_client import OAuth
from atlasstudio.config import settings

# Create OAuth registry
oauth = OAuth()

# Register Google OAuth client
oauth.register(
    name='google',
    client_id=settings.GOOGLE_CLIENT_ID,
    client_secret=settings.GOOGLE_CLIENT_SECRET,
    server_metadata_url='https://accounts.google.com/.well-known/openid-configuration',
    client_kwargs={
        'scope': 'openid email profile'
    }
)


def get_client(provider: str):
    """Return the registered client for provider, or None."""
    return oauth.create_client(provider)
