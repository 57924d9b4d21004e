"""
Blog provisioners: find or create the blog an LTI launch leads to and give
the launching user a role on it.

Two variants share one interface:

* ``course``: one blog per course placement, shared by everybody launching from it.
* ``student``: one blog per course placement and user, owned by that user.

Use ``get_provisioner`` to pick the variant for a requested blog type.
"""
import logging

from django.db import IntegrityError
from edx_django_utils.monitoring import function_trace, set_custom_attribute

from lti_blogs.data import BLOG_TYPE_COURSE, BLOG_TYPE_STUDENT
from lti_blogs.models import BlogMembership
from lti_blogs.signals import blog_created
from lti_blogs.utils import get_friendly_path

log = logging.getLogger(__name__)


class BlogProvisioner:
    """
    Shared find-or-create and role granting logic of the blog variants.

    Variants define the blog type, how a launch maps to an existing blog,
    the title and path of new blogs, and the role policy.
    """
    blog_type = None

    def __init__(self, store):
        """
        Arguments:
            store (BlogStore): storage handle
        """
        self.store = store

    def get_blog_type(self):
        return self.blog_type

    def get_creator(self, user):
        """
        Owner recorded on the blog, None for shared blogs.
        """
        raise NotImplementedError

    def get_title(self, context, user):
        raise NotImplementedError

    def get_path(self, context, user):
        raise NotImplementedError

    def get_version(self, context, user):  # pylint: disable=unused-argument
        return 1

    def get_blog_role(self, role_set):
        """
        Map LTI roles to a blog role.
        """
        raise NotImplementedError

    def exists_for(self, context, user):
        return self.store.blog_exists(
            context.course_id,
            context.resource_link_id,
            self.get_blog_type(),
            self.get_creator(user),
        )

    def find_blog_id(self, context, user):
        return self.store.find_blog_id(
            context.course_id,
            context.resource_link_id,
            self.get_blog_type(),
            self.get_creator(user),
        )

    @function_trace('lti_blogs.provisioners.get_or_create')
    def get_or_create(self, context, user):
        """
        Return the id of the blog for this launch, creating the blog if needed.

        Arguments:
            context (LaunchContext): course context of the launch
            user: the launching user

        Returns:
            int: blog id
        """
        set_custom_attribute('lti_blogs.blog_type', self.get_blog_type())
        if self.exists_for(context, user):
            return self.find_blog_id(context, user)

        try:
            blog = self.store.create_blog(
                title=self.get_title(context, user),
                path=self.get_path(context, user),
                site_category=context.site_category,
                course_id=context.course_id,
                resource_link_id=context.resource_link_id,
                blog_type=self.get_blog_type(),
                creator=self.get_creator(user),
                version=self.get_version(context, user),
            )
        except IntegrityError:
            # Another launch created the blog first
            blog_id = self.find_blog_id(context, user)
            if blog_id is None:
                raise
            return blog_id

        log.info(
            "Created %s blog %s (%s) for course %r, resource link %r",
            blog.blog_type,
            blog.pk,
            blog.path,
            blog.course_id,
            blog.resource_link_id,
        )
        blog_created.send(sender=self.__class__, blog=blog, user=user)
        return blog.pk

    def grant_role(self, user, blog_id, role_set):
        """
        Give the user the blog role matching their LTI roles.

        Granting a role the user already holds is a no-op.
        """
        role = self.get_blog_role(role_set)
        if self.store.grant_blog_role(user, blog_id, role):
            log.info("Granted %s role on blog %s to user %s", role, blog_id, user.pk)
        return role


class CourseBlogProvisioner(BlogProvisioner):
    """
    One blog per course placement, shared by every user launching from it.
    """
    blog_type = BLOG_TYPE_COURSE

    def get_creator(self, user):
        return None

    def get_title(self, context, user):
        return context.course_title or context.course_id

    def get_path(self, context, user):
        return get_friendly_path(context.course_id)

    def get_blog_role(self, role_set):
        if role_set.is_admin():
            return BlogMembership.ADMINISTRATOR
        if role_set.is_learner():
            return BlogMembership.AUTHOR
        return BlogMembership.SUBSCRIBER


class StudentBlogProvisioner(BlogProvisioner):
    """
    One blog per course placement and user, owned by that user.
    """
    blog_type = BLOG_TYPE_STUDENT

    def get_creator(self, user):
        return user

    def get_title(self, context, user):
        return f"{user.first_name} {user.last_name} / {context.course_title}"

    def get_path(self, context, user):
        return get_friendly_path(f"{user.username}_{context.course_title}")

    def get_blog_max_version(self, context, user):
        return self.store.get_max_version(context.course_id, self.get_blog_type(), user)

    def get_blog_count(self, context, user):
        return self.store.count_blogs(context.course_id, self.get_blog_type(), user)

    def get_version(self, context, user):
        """
        New student blogs get the next version of the user's blogs in the course.
        """
        max_version = self.get_blog_max_version(context, user)
        log.debug(
            "User %s has %s student blogs in course %r, highest version %s",
            user.pk,
            self.get_blog_count(context, user),
            context.course_id,
            max_version,
        )
        return max_version + 1

    def get_blog_role(self, role_set):
        # Learners own their blog, so they get the same role as administrators
        if role_set.is_learner() or role_set.is_admin():
            return BlogMembership.ADMINISTRATOR
        return BlogMembership.AUTHOR


PROVISIONERS = {
    BLOG_TYPE_COURSE: CourseBlogProvisioner,
    BLOG_TYPE_STUDENT: StudentBlogProvisioner,
}


def get_provisioner(blog_type, store):
    """
    Returns the provisioner for a requested blog type.

    An unset blog type gives the course blog provisioner.
    """
    if not blog_type:
        blog_type = BLOG_TYPE_COURSE
    try:
        provisioner_class = PROVISIONERS[blog_type]
    except KeyError:
        log.warning("Unknown blog type %r, using the course blog", blog_type)
        provisioner_class = CourseBlogProvisioner
    return provisioner_class(store)
