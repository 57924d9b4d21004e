"""
Storage handle used by the launch pipeline to reach users and blogs.

Every component receives a BlogStore explicitly; the store is bound to one
database alias so the pipeline never touches a hidden default connection.
"""
import logging

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Max

from lti_blogs.models import Blog, BlogMembership

log = logging.getLogger(__name__)

MAX_PATH_ATTEMPTS = 100


class BlogStore:
    """
    Queries and writes over users, blogs and blog memberships.
    """
    def __init__(self, using='default'):
        self.using = using

    @property
    def users(self):
        return get_user_model().objects.db_manager(self.using)

    @property
    def blogs(self):
        return Blog.objects.using(self.using)

    @property
    def memberships(self):
        return BlogMembership.objects.using(self.using)

    def atomic(self):
        return transaction.atomic(using=self.using)

    # Users

    def get_user_by_username(self, username):
        return self.users.filter(username=username).first()

    def email_in_use(self, email, exclude_username=None):
        """
        Returns True if another account already uses this email address.
        """
        if not email:
            return False
        accounts = self.users.filter(email__iexact=email)
        if exclude_username is not None:
            accounts = accounts.exclude(username=exclude_username)
        return accounts.exists()

    def create_user(self, username, password, email):
        """
        Creates an account. Raises IntegrityError if the username is already taken.
        """
        with self.atomic():
            return self.users.create_user(username, email=email, password=password)

    def update_user(self, user, **fields):
        for name, value in fields.items():
            setattr(user, name, value)
        user.save(using=self.using, update_fields=list(fields))
        return user

    # Blogs

    def get_blog(self, blog_id):
        return self.blogs.filter(pk=blog_id).first()

    def _blog_filter(self, course_id, resource_link_id, blog_type, creator=None):
        blogs = self.blogs.filter(
            course_id=course_id,
            resource_link_id=resource_link_id,
            blog_type=blog_type,
        )
        if creator is not None:
            blogs = blogs.filter(creator=creator)
        return blogs

    def blog_exists(self, course_id, resource_link_id, blog_type, creator=None):
        return self._blog_filter(course_id, resource_link_id, blog_type, creator).exists()

    def find_blog_id(self, course_id, resource_link_id, blog_type, creator=None):
        """
        Returns the id of the blog matching the given placement, or None.
        """
        return self._blog_filter(
            course_id, resource_link_id, blog_type, creator
        ).values_list('pk', flat=True).first()

    def list_blogs(self, course_id, resource_link_id, blog_type):
        return list(self._blog_filter(course_id, resource_link_id, blog_type).order_by('title', 'pk'))

    def get_max_version(self, course_id, blog_type, creator):
        """
        Returns the highest version of the creator's blogs of this type in a course, 0 if none.
        """
        result = self.blogs.filter(
            course_id=course_id,
            blog_type=blog_type,
            creator=creator,
        ).aggregate(max_version=Max('version'))
        return result['max_version'] or 0

    def count_blogs(self, course_id, blog_type, creator):
        return self.blogs.filter(course_id=course_id, blog_type=blog_type, creator=creator).count()

    def is_course_blog(self, course_id, blog_id, blog_type=None):
        """
        Returns True if the blog exists and belongs to the course, and is of ``blog_type`` when given.
        """
        blogs = self.blogs.filter(pk=blog_id, course_id=course_id)
        if blog_type is not None:
            blogs = blogs.filter(blog_type=blog_type)
        return blogs.exists()

    def get_free_path(self, path):
        """
        Returns ``path``, or ``path-<n>`` if the path is already used by another blog.
        """
        path = path or 'blog'
        candidate = path
        for attempt in range(2, MAX_PATH_ATTEMPTS + 2):
            if not self.blogs.filter(path=candidate).exists():
                return candidate
            suffix = f'-{attempt}'
            candidate = path[:Blog._meta.get_field('path').max_length - len(suffix)] + suffix
        raise ValueError(f'Unable to find a free blog path for {path!r}')

    def create_blog(self, **fields):
        """
        Creates a blog. Raises IntegrityError if the placement already has one.

        A path taken by a concurrent launch between choosing it and inserting
        the blog is replaced by the next free one.
        """
        requested_path = fields.get('path')
        for __ in range(MAX_PATH_ATTEMPTS):
            fields['path'] = self.get_free_path(requested_path)
            try:
                with self.atomic():
                    return self.blogs.create(**fields)
            except IntegrityError:
                if not self.blogs.filter(path=fields['path']).exists():
                    raise
                log.info("Blog path %r was taken concurrently, choosing another", fields['path'])
        raise ValueError(f'Unable to find a free blog path for {requested_path!r}')

    # Memberships

    def get_blog_role(self, user, blog_id):
        return self.memberships.filter(user=user, blog_id=blog_id).values_list('role', flat=True).first()

    def grant_blog_role(self, user, blog_id, role):
        """
        Gives a user a role on a blog.

        Granting the role the user already holds changes nothing; a different
        role replaces the previous one.

        Returns:
            bool: True if a membership was created or changed.
        """
        with self.atomic():
            membership, created = self.memberships.get_or_create(
                blog_id=blog_id,
                user=user,
                defaults={'role': role},
            )
            if created:
                return True
            if membership.role == role:
                return False
            log.info("Changing role of user %s on blog %s from %s to %s", user.pk, blog_id, membership.role, role)
            membership.role = role
            membership.save(using=self.using, update_fields=['role', 'modified'])
            return True
