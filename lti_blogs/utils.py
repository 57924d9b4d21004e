"""
Utility functions for LTI blog launches
"""
from urllib.parse import urlencode

from django.conf import settings
from django.utils.crypto import get_random_string
from django.utils.text import slugify


DEFAULT_HOME_URL_FORMAT = '/{path}/'
DEFAULT_NONCE_TIMEOUT = 5400
DEFAULT_SITE_CATEGORY = 1


def get_lti_blogs_configuration():
    """
    Returns the admin-editable configuration if it is enabled, None otherwise.
    """
    # pylint: disable=import-outside-toplevel
    from lti_blogs.models import LtiBlogsConfiguration

    config = LtiBlogsConfiguration.current()
    return config if config.enabled else None


def get_helpline_url():
    """
    Returns the URL of the support page shown when an account cannot be created.

    The admin configuration wins over the LTI_BLOGS_HELPLINE_URL setting.
    """
    config = get_lti_blogs_configuration()
    if config and config.helpline_url:
        return config.helpline_url
    return getattr(settings, 'LTI_BLOGS_HELPLINE_URL', '')


def get_default_site_category():
    config = get_lti_blogs_configuration()
    if config:
        return config.default_site_category
    return DEFAULT_SITE_CATEGORY


def get_auth_failure_status():
    """
    HTTP status of the response sent when a launch cannot be verified.

    Set LTI_BLOGS_AUTH_FAILURE_STATUS to 200 if an LMS integration relies on
    the legacy behaviour of answering failed launches with a success status.
    """
    return getattr(settings, 'LTI_BLOGS_AUTH_FAILURE_STATUS', 403)


def get_nonce_timeout():
    return getattr(settings, 'LTI_BLOGS_NONCE_TIMEOUT', DEFAULT_NONCE_TIMEOUT)


def oauth_enforce_ssl():
    return getattr(settings, 'LTI_BLOGS_OAUTH_ENFORCE_SSL', True)


def is_primary_site(request):
    """
    Returns True if the request is addressed to the site LTI launches are accepted on.

    Every host is primary when LTI_BLOGS_PRIMARY_HOST is not set.
    """
    primary_host = getattr(settings, 'LTI_BLOGS_PRIMARY_HOST', None)
    if not primary_host:
        return True
    return request.get_host() == primary_host


def get_request_params(request):
    """
    Returns the parameters of a request: query string for GET, form body otherwise.
    """
    return request.GET if request.method == 'GET' else request.POST


def get_blog_home_url(blog):
    """
    Returns the home page URL of a blog.

    :param blog: the Blog to link to
    """
    url_format = getattr(settings, 'LTI_BLOGS_HOME_URL_FORMAT', DEFAULT_HOME_URL_FORMAT)
    return url_format.format(path=blog.path, blog_id=blog.id)


def get_staff_view_url(blog):
    """
    Returns the link a member of staff follows to be signed in to a student blog.
    """
    return '/?' + urlencode({'lti_staff_view_blog': 'true', 'blog_id': blog.id})


def get_friendly_path(text):
    """
    Returns a URL safe slug for a blog path, e.g. ``s1234567_Intro to Python`` -> ``s1234567_intro-to-python``.
    """
    return slugify(text)


def random_string(length, alphabet):
    """
    Generates a cryptographically secure random string, used for generated passwords.

    Arguments:
        length (int): number of characters, must be positive
        alphabet (str): characters to draw from, at least two of them

    Raises:
        ValueError: on a non-positive length or an alphabet with fewer than two characters
    """
    if length < 1:
        raise ValueError('Length must be a positive integer')

    if len(alphabet) < 2:
        raise ValueError('Invalid alphabet')

    return get_random_string(length, allowed_chars=alphabet)
