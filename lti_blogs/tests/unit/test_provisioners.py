"""
Unit tests for lti_blogs.provisioners module
"""
from unittest.mock import Mock, patch

import ddt
from django.contrib.auth import get_user_model
from django.db import IntegrityError
from django.test import TestCase

from lti_blogs.data import BLOG_TYPE_COURSE, BLOG_TYPE_STUDENT, LaunchContext
from lti_blogs.lti_1p1.roles import classify
from lti_blogs.models import Blog, BlogMembership
from lti_blogs.provisioners import CourseBlogProvisioner, StudentBlogProvisioner, get_provisioner
from lti_blogs.signals import blog_created
from lti_blogs.storage import BlogStore

User = get_user_model()


@ddt.ddt
class TestGetProvisioner(TestCase):
    """
    Unit tests for get_provisioner
    """

    @ddt.data(
        ('', CourseBlogProvisioner),
        (None, CourseBlogProvisioner),
        (BLOG_TYPE_COURSE, CourseBlogProvisioner),
        (BLOG_TYPE_STUDENT, StudentBlogProvisioner),
        ('portfolio', CourseBlogProvisioner),
    )
    @ddt.unpack
    def test_provisioner_class(self, blog_type, expected_class):
        store = BlogStore()
        provisioner = get_provisioner(blog_type, store)

        self.assertIsInstance(provisioner, expected_class)
        self.assertIs(provisioner.store, store)


class ProvisionerTestMixin:
    """
    Shared fixtures of the provisioner tests.
    """

    def setUp(self):
        super().setUp()
        self.store = BlogStore()
        self.user = User.objects.create_user('s1234567', first_name='Ada', last_name='Lovelace')
        self.other_user = User.objects.create_user('s7654321', first_name='Grace', last_name='Hopper')
        self.context = LaunchContext(
            course_id='CS101',
            resource_link_id='link-1',
            course_title='Intro to Python',
            site_category=3,
        )


@ddt.ddt
class TestCourseBlogProvisioner(ProvisionerTestMixin, TestCase):
    """
    Unit tests for CourseBlogProvisioner
    """

    def setUp(self):
        super().setUp()
        self.provisioner = CourseBlogProvisioner(self.store)

    def test_creates_blog(self):
        handler = Mock()
        blog_created.connect(handler)
        self.addCleanup(blog_created.disconnect, handler)

        blog_id = self.provisioner.get_or_create(self.context, self.user)

        blog = Blog.objects.get(pk=blog_id)
        self.assertEqual(blog.blog_type, BLOG_TYPE_COURSE)
        self.assertEqual(blog.title, 'Intro to Python')
        self.assertEqual(blog.path, 'cs101')
        self.assertEqual(blog.site_category, 3)
        self.assertEqual(blog.version, 1)
        self.assertIsNone(blog.creator)
        handler.assert_called_once()
        self.assertEqual(handler.call_args[1]['blog'], blog)

    def test_title_falls_back_to_course_id(self):
        context = LaunchContext(course_id='CS101', resource_link_id='link-1')

        blog_id = self.provisioner.get_or_create(context, self.user)

        self.assertEqual(Blog.objects.get(pk=blog_id).title, 'CS101')

    def test_blog_is_shared(self):
        blog_id = self.provisioner.get_or_create(self.context, self.user)

        self.assertEqual(self.provisioner.get_or_create(self.context, self.other_user), blog_id)
        self.assertEqual(Blog.objects.count(), 1)

    def test_blog_per_resource_link(self):
        other_context = LaunchContext(course_id='CS101', resource_link_id='link-2', course_title='Intro to Python')

        first = self.provisioner.get_or_create(self.context, self.user)
        second = self.provisioner.get_or_create(other_context, self.user)

        self.assertNotEqual(first, second)
        self.assertEqual(Blog.objects.get(pk=second).path, 'cs101-2')

    def test_concurrent_creation(self):
        blog_id = self.provisioner.get_or_create(self.context, self.user)

        with patch.object(self.provisioner, 'exists_for', return_value=False):
            self.assertEqual(self.provisioner.get_or_create(self.context, self.other_user), blog_id)
        self.assertEqual(Blog.objects.count(), 1)

    def test_creation_failure_is_raised(self):
        with patch.object(self.store, 'create_blog', side_effect=IntegrityError):
            with self.assertRaises(IntegrityError):
                self.provisioner.get_or_create(self.context, self.user)

    @ddt.data(
        ('Instructor', BlogMembership.ADMINISTRATOR),
        ('urn:lti:instrole:ims/lis/Administrator', BlogMembership.ADMINISTRATOR),
        ('Learner,Instructor', BlogMembership.ADMINISTRATOR),
        ('Learner', BlogMembership.AUTHOR),
        ('Mentor', BlogMembership.SUBSCRIBER),
        ('', BlogMembership.SUBSCRIBER),
    )
    @ddt.unpack
    def test_grant_role(self, roles, expected_role):
        blog_id = self.provisioner.get_or_create(self.context, self.user)

        self.assertEqual(self.provisioner.grant_role(self.user, blog_id, classify(roles)), expected_role)
        self.assertEqual(self.store.get_blog_role(self.user, blog_id), expected_role)


@ddt.ddt
class TestStudentBlogProvisioner(ProvisionerTestMixin, TestCase):
    """
    Unit tests for StudentBlogProvisioner
    """

    def setUp(self):
        super().setUp()
        self.provisioner = StudentBlogProvisioner(self.store)

    def test_creates_blog(self):
        blog_id = self.provisioner.get_or_create(self.context, self.user)

        blog = Blog.objects.get(pk=blog_id)
        self.assertEqual(blog.blog_type, BLOG_TYPE_STUDENT)
        self.assertEqual(blog.title, 'Ada Lovelace / Intro to Python')
        self.assertEqual(blog.path, 's1234567_intro-to-python')
        self.assertEqual(blog.creator, self.user)
        self.assertEqual(blog.version, 1)

    def test_blog_per_user(self):
        first = self.provisioner.get_or_create(self.context, self.user)
        second = self.provisioner.get_or_create(self.context, self.other_user)

        self.assertNotEqual(first, second)
        self.assertEqual(self.provisioner.get_or_create(self.context, self.user), first)
        self.assertEqual(Blog.objects.count(), 2)

    def test_next_version_in_course(self):
        self.provisioner.get_or_create(self.context, self.user)
        other_link = LaunchContext(course_id='CS101', resource_link_id='link-2', course_title='Intro to Python')

        blog_id = self.provisioner.get_or_create(other_link, self.user)

        self.assertEqual(Blog.objects.get(pk=blog_id).version, 2)
        self.assertEqual(self.provisioner.get_blog_count(other_link, self.user), 2)
        self.assertEqual(self.provisioner.get_blog_max_version(other_link, self.user), 2)

    def test_version_is_per_user(self):
        self.provisioner.get_or_create(self.context, self.user)

        blog_id = self.provisioner.get_or_create(self.context, self.other_user)

        self.assertEqual(Blog.objects.get(pk=blog_id).version, 1)

    @ddt.data(
        ('Learner', BlogMembership.ADMINISTRATOR),
        ('Instructor', BlogMembership.ADMINISTRATOR),
        ('urn:lti:sysrole:ims/lis/SysAdmin', BlogMembership.ADMINISTRATOR),
        ('Mentor', BlogMembership.AUTHOR),
        ('', BlogMembership.AUTHOR),
    )
    @ddt.unpack
    def test_grant_role(self, roles, expected_role):
        blog_id = self.provisioner.get_or_create(self.context, self.user)

        self.assertEqual(self.provisioner.grant_role(self.other_user, blog_id, classify(roles)), expected_role)
        self.assertEqual(self.store.get_blog_role(self.other_user, blog_id), expected_role)

    def test_grant_role_twice(self):
        blog_id = self.provisioner.get_or_create(self.context, self.user)

        self.provisioner.grant_role(self.user, blog_id, classify('Learner'))
        self.provisioner.grant_role(self.user, blog_id, classify('Learner'))

        self.assertEqual(BlogMembership.objects.filter(blog_id=blog_id, user=self.user).count(), 1)
