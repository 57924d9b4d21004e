"""
Utility functions for verifying OAuth 1.0a signatures of LTI 1.1 launches.
"""

import logging

from edx_django_utils.cache import TieredCache, get_cache_key
from oauthlib import oauth1

from lti_blogs.utils import get_nonce_timeout, oauth_enforce_ssl

from .exceptions import InvalidLaunchSignature

log = logging.getLogger(__name__)


class LtiRequestValidator(oauth1.RequestValidator):
    """
    `oauthlib` request validator backed by the registered tool consumers.

    Consumer keys and nonces sent by LMSs do not follow the length and
    character set recommendations of RFC 5849, so any non-empty value is
    accepted. Nonces are remembered in the TieredCache to reject replays.
    """
    allowed_signature_methods = (oauth1.SIGNATURE_HMAC_SHA1, oauth1.SIGNATURE_HMAC_SHA256)
    dummy_client = 'dummy_lti_blogs_consumer'
    dummy_secret = 'dummy_lti_blogs_secret'

    def __init__(self, consumers):
        """
        Arguments:
            consumers (QuerySet): tool consumers allowed to launch
        """
        super().__init__()
        self.consumers = consumers

    @property
    def enforce_ssl(self):
        return oauth_enforce_ssl()

    def check_client_key(self, client_key):
        return bool(client_key)

    def check_nonce(self, nonce):
        return bool(nonce)

    def get_consumer(self, client_key):
        return self.consumers.filter(consumer_key=client_key).first()

    def validate_client_key(self, client_key, request):
        consumer = self.get_consumer(client_key)
        return consumer is not None and consumer.is_available()

    def get_client_secret(self, client_key, request):
        consumer = self.get_consumer(client_key)
        if consumer is None:
            return self.dummy_secret
        return consumer.secret

    def validate_timestamp_and_nonce(self, client_key, timestamp, nonce, request,
                                     request_token=None, access_token=None):
        nonce_key = get_cache_key(app='lti_blogs', key='oauth_nonce', client_key=client_key, nonce=nonce)
        if TieredCache.get_cached_response(nonce_key).is_found:
            log.warning("[LTI] Replayed OAuth nonce %r for consumer %r", nonce, client_key)
            return False
        TieredCache.set_all_tiers(nonce_key, timestamp, get_nonce_timeout())
        return True


def verify_launch_signature(request, consumers):
    """
    Verify the OAuth signature of an LTI launch.

    Arguments:
        request (django.http.HttpRequest): the launch request
        consumers (QuerySet): tool consumers allowed to launch

    Raises:
        InvalidLaunchSignature: if the consumer key, nonce, timestamp or signature is rejected.
    """
    headers = {'Content-Type': request.content_type or 'application/x-www-form-urlencoded'}
    if 'Authorization' in request.headers:
        headers['Authorization'] = request.headers['Authorization']

    body = request.body if request.method != 'GET' else None
    endpoint = oauth1.SignatureOnlyEndpoint(LtiRequestValidator(consumers))
    try:
        valid, oauth_request = endpoint.validate_request(
            request.build_absolute_uri(),
            http_method=request.method,
            body=body,
            headers=headers,
        )
    except ValueError as err:
        raise InvalidLaunchSignature("Unable to read OAuth parameters of the launch.") from err

    if not valid:
        log.warning(
            "[LTI] OAuth signature verification failed for consumer %r, url: %s, method: %s",
            getattr(oauth_request, 'client_key', None),
            request.build_absolute_uri(),
            request.method,
        )
        raise InvalidLaunchSignature("OAuth signature verification has failed.")

    return oauth_request.client_key
