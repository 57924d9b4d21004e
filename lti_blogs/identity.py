"""
Find-or-create of the user accounts LTI launches sign in as.
"""
import logging
import string

from django.db import IntegrityError
from edx_django_utils.cache import RequestCache

from lti_blogs.exceptions import DuplicateEmailError
from lti_blogs.utils import random_string

log = logging.getLogger(__name__)

PASSWORD_LENGTH = 20
PASSWORD_ALPHABET = string.digits + string.ascii_uppercase + string.ascii_lowercase

IDENTITY_CACHE_NAMESPACE = 'lti_blogs.identity'


def generate_password():
    return random_string(PASSWORD_LENGTH, PASSWORD_ALPHABET)


def clear_identity_cache():
    """
    Forget the users resolved during this request.
    """
    RequestCache(IDENTITY_CACHE_NAMESPACE).clear()


class IdentityResolver:
    """
    Resolves the identity sent by an LMS to a user account, creating it on first launch.
    """
    def __init__(self, store):
        self.store = store
        self.cache = RequestCache(IDENTITY_CACHE_NAMESPACE)

    def resolve_or_create(self, identity):
        """
        Return the user with the identity's username, creating it if needed.

        An existing user is returned unchanged: names and email are only set
        when the account is created.

        Arguments:
            identity (IdentityData): attributes sent by the LMS

        Raises:
            DuplicateEmailError: if a new account would reuse another account's email address
        """
        cached = self.cache.get_cached_response(identity.username)
        if cached.is_found:
            return cached.value

        user = self.store.get_user_by_username(identity.username)
        if user is None:
            user = self._create(identity)

        self.cache.set(identity.username, user)
        return user

    def _create(self, identity):
        if self.store.email_in_use(identity.email, exclude_username=identity.username):
            log.info("Cannot create user %r: email address already in use", identity.username)
            raise DuplicateEmailError(identity.email)

        try:
            user = self.store.create_user(identity.username, generate_password(), identity.email)
        except IntegrityError:
            # Another launch created the same user first
            user = self.store.get_user_by_username(identity.username)
            if user is None:
                raise
            return user

        log.info("Created user %r from LTI launch", identity.username)
        return self.store.update_user(user, first_name=identity.first_name, last_name=identity.last_name)
