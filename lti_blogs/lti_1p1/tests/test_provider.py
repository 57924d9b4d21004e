"""
Unit tests for lti_blogs.lti_1p1.provider module
"""

from datetime import timedelta
from unittest.mock import Mock, patch

import ddt
from django.test import TestCase
from django.utils import timezone

from lti_blogs.lti_1p1.exceptions import ConsumerNotEnabled, InvalidLaunchSignature, MissingLaunchParameter
from lti_blogs.lti_1p1.provider import (
    LtiToolProvider,
    get_launch_username,
    get_requested_blog_type,
    get_site_category,
    is_basic_launch_request,
)
from lti_blogs.models import LtiBlogsConfiguration
from lti_blogs.session import SessionState
from lti_blogs.tests.test_utils import (
    CONSUMER_KEY,
    clear_caches,
    make_consumer,
    make_launch_params,
    make_signed_launch_request,
)


@ddt.ddt
class TestLaunchParameters(TestCase):
    """
    Unit tests for the launch parameter helpers
    """

    def setUp(self):
        super().setUp()
        clear_caches()

    def test_basic_launch_request(self):
        params = make_launch_params(oauth_consumer_key=CONSUMER_KEY)

        self.assertTrue(is_basic_launch_request(params))

    @ddt.data(
        {'lti_message_type': 'ContentItemSelectionRequest'},
        {'lti_message_type': None},
        {'lti_version': 'LTI-2p0'},
        {'oauth_consumer_key': None},
        {'resource_link_id': None},
    )
    def test_not_a_basic_launch_request(self, overrides):
        params = make_launch_params(**{'oauth_consumer_key': CONSUMER_KEY, **overrides})

        self.assertFalse(is_basic_launch_request(params))

    @ddt.data(
        ({'lis_person_sourcedid': 's1'}, 's1'),
        ({'ext_user_username': 's2'}, 's2'),
        ({'lis_person_sourcedid': '', 'ext_user_username': 's2'}, 's2'),
        ({'lis_person_sourcedid': 's1', 'ext_user_username': 's2'}, 's1'),
        ({}, ''),
    )
    @ddt.unpack
    def test_launch_username(self, params, expected):
        self.assertEqual(get_launch_username(params), expected)

    @ddt.data(
        ('', ''),
        ('course', 'course'),
        ('student', 'student'),
        ('portfolio', ''),
    )
    @ddt.unpack
    def test_requested_blog_type(self, blog_type, expected):
        self.assertEqual(get_requested_blog_type({'custom_blog_type': blog_type}), expected)

    @ddt.data(
        (None, 1),
        ('', 1),
        ('7', 7),
        ('seven', 1),
        ('-3', 1),
        ('0', 1),
    )
    @ddt.unpack
    def test_site_category(self, site_category, expected):
        params = {} if site_category is None else {'custom_site_category': site_category}

        self.assertEqual(get_site_category(params), expected)

    def test_site_category_default_from_configuration(self):
        LtiBlogsConfiguration.objects.create(enabled=True, default_site_category=4)

        self.assertEqual(get_site_category({}), 4)


@ddt.ddt
class TestLtiToolProvider(TestCase):
    """
    Unit tests for LtiToolProvider
    """

    def setUp(self):
        super().setUp()
        clear_caches()
        self.consumer = make_consumer()
        self.provider = LtiToolProvider()

    def test_get_verified_launch(self):
        params = make_launch_params(
            roles='Instructor,urn:lti:role:ims/lis/Mentor',
            custom_blog_type='student',
            custom_site_category='3',
        )

        launch = self.provider.get_verified_launch(params, CONSUMER_KEY)

        self.assertEqual(launch.identity.username, 's1234567')
        self.assertEqual(launch.identity.email, 's1234567@example.com')
        self.assertEqual(launch.identity.first_name, 'Ada')
        self.assertEqual(launch.identity.last_name, 'Lovelace')
        self.assertEqual(launch.context.course_id, 'CS101')
        self.assertEqual(launch.context.resource_link_id, 'link-1')
        self.assertEqual(launch.context.course_title, 'Intro to Python')
        self.assertEqual(launch.context.requested_resource_type, 'student')
        self.assertEqual(launch.context.site_category, 3)
        self.assertTrue(launch.roles.is_instructor())
        self.assertFalse(launch.roles.is_learner())
        self.assertEqual(launch.consumer_key, CONSUMER_KEY)

    def test_optional_parameters_missing(self):
        params = make_launch_params(
            lis_person_contact_email_primary=None,
            lis_person_name_given=None,
            lis_person_name_family=None,
            context_title=None,
            roles=None,
        )

        launch = self.provider.get_verified_launch(params)

        self.assertEqual(launch.identity.email, '')
        self.assertEqual(launch.context.course_title, '')
        self.assertEqual(launch.context.requested_resource_type, '')
        self.assertEqual(launch.context.site_category, 1)
        self.assertFalse(launch.roles.tags)

    @ddt.data(
        {'lis_person_sourcedid': None},
        {'context_label': None},
        {'context_label': ''},
    )
    def test_missing_identity_or_course(self, overrides):
        with self.assertRaises(MissingLaunchParameter):
            self.provider.get_verified_launch(make_launch_params(**overrides))

    def test_handle_request(self):
        session_state = SessionState()
        request = make_signed_launch_request(make_launch_params())

        launch = self.provider.handle_request(request, session_state)

        self.assertTrue(session_state.authenticated)
        self.assertEqual(launch.identity.username, 's1234567')
        self.assertEqual(launch.consumer_key, CONSUMER_KEY)

    def test_handle_request_bad_signature(self):
        session_state = SessionState()
        request = make_signed_launch_request(make_launch_params(), secret='wrong')

        with self.assertRaises(InvalidLaunchSignature):
            self.provider.handle_request(request, session_state)
        self.assertFalse(session_state.authenticated)

    def test_handle_request_consumer_not_yet_enabled(self):
        self.consumer.enable_from = timezone.now() + timedelta(days=1)
        self.consumer.save()
        session_state = SessionState()
        request = make_signed_launch_request(make_launch_params())

        with self.assertRaises(InvalidLaunchSignature):
            self.provider.handle_request(request, session_state)
        self.assertFalse(session_state.authenticated)

    def test_handle_request_missing_username(self):
        session_state = SessionState()
        request = make_signed_launch_request(make_launch_params(lis_person_sourcedid=None))

        with self.assertRaises(MissingLaunchParameter):
            self.provider.handle_request(request, session_state)
        self.assertFalse(session_state.authenticated)

    @patch('lti_blogs.lti_1p1.provider.verify_launch_signature', Mock(return_value=CONSUMER_KEY))
    def test_handle_request_consumer_disabled_after_signature_check(self):
        self.consumer.enabled = False
        self.consumer.save()
        session_state = SessionState()
        request = make_signed_launch_request(make_launch_params())

        with self.assertRaises(ConsumerNotEnabled):
            self.provider.handle_request(request, session_state)
        self.assertFalse(session_state.authenticated)
