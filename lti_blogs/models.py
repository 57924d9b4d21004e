"""
LTI tool consumer, blog and blog membership models.
"""

from config_models.models import ConfigurationModel
from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from lti_blogs.data import BLOG_TYPE_COURSE, BLOG_TYPE_STUDENT


class LtiToolConsumer(models.Model):
    """
    An LMS allowed to launch into this site, identified by its OAuth consumer key.

    .. no_pii:
    """
    name = models.CharField(max_length=255)
    consumer_key = models.CharField(
        max_length=255,
        unique=True,
        help_text=_("OAuth consumer key sent by the LMS in launches."),
    )
    secret = models.CharField(
        max_length=255,
        help_text=_("Shared secret used to sign launches. Keep this value secret."),
    )
    enabled = models.BooleanField(default=True)
    enable_from = models.DateTimeField(null=True, blank=True)
    enable_until = models.DateTimeField(null=True, blank=True)
    created = models.DateTimeField(auto_now_add=True)

    def is_available(self, now=None):
        """
        Return True if launches from this consumer are currently accepted.
        """
        now = now or timezone.now()
        if not self.enabled:
            return False
        if self.enable_from and now < self.enable_from:
            return False
        if self.enable_until and now > self.enable_until:
            return False
        return True

    def __str__(self):
        return f"{self.name} <{self.consumer_key}>"


class Blog(models.Model):
    """
    A blog provisioned for an LTI placement.

    Course blogs are shared by everybody launching from the same placement.
    Student blogs belong to the user that created them.

    .. no_pii:
    """
    BLOG_TYPE_CHOICES = [
        (BLOG_TYPE_COURSE, _('Course blog')),
        (BLOG_TYPE_STUDENT, _('Student blog')),
    ]

    title = models.CharField(max_length=255)
    path = models.SlugField(max_length=255, unique=True)
    site_category = models.PositiveIntegerField(default=1)

    course_id = models.CharField(max_length=255, db_index=True)
    resource_link_id = models.CharField(max_length=255)
    blog_type = models.CharField(max_length=20, choices=BLOG_TYPE_CHOICES)
    creator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.CASCADE,
        related_name='lti_blogs',
    )
    version = models.PositiveIntegerField(default=1)
    created = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['course_id', 'resource_link_id'],
                condition=Q(blog_type=BLOG_TYPE_COURSE),
                name='lti_blogs_unique_course_blog',
            ),
            models.UniqueConstraint(
                fields=['course_id', 'resource_link_id', 'creator'],
                condition=Q(blog_type=BLOG_TYPE_STUDENT),
                name='lti_blogs_unique_student_blog',
            ),
        ]

    def __str__(self):
        return f"[{self.blog_type}] {self.title} ({self.course_id})"


class BlogMembership(models.Model):
    """
    A user's role on a blog.

    .. no_pii:
    """
    ADMINISTRATOR = 'administrator'
    EDITOR = 'editor'
    AUTHOR = 'author'
    CONTRIBUTOR = 'contributor'
    SUBSCRIBER = 'subscriber'
    ROLE_CHOICES = [
        (ADMINISTRATOR, _('Administrator')),
        (EDITOR, _('Editor')),
        (AUTHOR, _('Author')),
        (CONTRIBUTOR, _('Contributor')),
        (SUBSCRIBER, _('Subscriber')),
    ]

    blog = models.ForeignKey(Blog, on_delete=models.CASCADE, related_name='memberships')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='lti_blog_memberships')
    role = models.CharField(max_length=20, choices=ROLE_CHOICES)
    modified = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = [['blog', 'user']]

    def __str__(self):
        return f"{self.user} is {self.role} of blog {self.blog_id}"


class LtiBlogsConfiguration(ConfigurationModel):
    """
    Site-wide settings for LTI launches, editable from the Django admin.

    .. no_pii:
    """
    helpline_url = models.URLField(
        blank=True,
        help_text=_("Support page users are sent to when their account cannot be created."),
    )
    default_site_category = models.PositiveIntegerField(
        default=1,
        help_text=_("Category of new blogs when the launch does not send custom_site_category."),
    )

    def __str__(self):
        return f"LtiBlogsConfiguration(enabled={self.enabled}, helpline_url={self.helpline_url!r})"
