"""
lti_blogs Django application initialization.
"""

from django.apps import AppConfig


class LtiBlogsApp(AppConfig):
    """
    Configuration for the lti_blogs Django application.
    """

    name = 'lti_blogs'
    verbose_name = 'LTI blogs'
    default_auto_field = 'django.db.models.AutoField'
