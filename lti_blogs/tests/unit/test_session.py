"""
Unit tests for lti_blogs.session module
"""
from django.contrib.auth import get_user_model
from django.contrib.sessions.backends.db import SessionStore
from django.test import RequestFactory, TestCase

from lti_blogs.data import IdentityData
from lti_blogs.lti_1p1.roles import classify
from lti_blogs.session import SESSION_KEY_PREFIX, SessionState
from lti_blogs.tests.test_utils import add_session


class TestSessionState(TestCase):
    """
    Unit tests for SessionState
    """

    def test_defaults(self):
        state = SessionState.load({})

        self.assertFalse(state.authenticated)
        self.assertFalse(state.staff_mode)
        self.assertEqual(state.staff_roles, [])
        self.assertEqual(state.staff_identity, {})
        self.assertIsNone(state.current_blog_id)

    def test_save_and_load(self):
        session = SessionStore()
        state = SessionState(authenticated=True, current_blog_id=4)

        state.save(session)

        self.assertTrue(session[SESSION_KEY_PREFIX + 'authenticated'])
        self.assertEqual(SessionState.load(session), state)

    def test_ignores_unrelated_keys(self):
        state = SessionState.load({'authenticated': True, 'other.key': 1})

        self.assertFalse(state.authenticated)

    def test_staff_context(self):
        identity = IdentityData(username='t001', email='t001@example.com', first_name='Grace', last_name='Hopper')
        state = SessionState()

        state.set_staff_context(identity, classify('Instructor,Mentor'), 'CS101', 'link-1')
        session = SessionStore()
        state.save(session)
        loaded = SessionState.load(session)

        self.assertTrue(loaded.staff_mode)
        self.assertEqual(loaded.staff_course_id, 'CS101')
        self.assertEqual(loaded.staff_resource_link_id, 'link-1')
        self.assertEqual(loaded.get_staff_identity(), identity)
        self.assertEqual(loaded.get_staff_role_set(), classify(['Instructor', 'Mentor']))

    def test_reset(self):
        user = get_user_model().objects.create_user('s1234567')
        request = add_session(RequestFactory().get('/'), user=user)
        SessionState(authenticated=True, staff_mode=True).save(request.session)
        request.session.save()
        old_session_key = request.session.session_key

        state = SessionState.reset(request)

        self.assertEqual(state, SessionState())
        self.assertFalse(request.user.is_authenticated)
        self.assertNotIn(SESSION_KEY_PREFIX + 'staff_mode', request.session)
        self.assertNotEqual(request.session.session_key, old_session_key)
