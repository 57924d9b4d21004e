"""
Unit tests for LTI blog models.
"""
from datetime import timedelta

import ddt
from django.test.testcases import TestCase
from django.utils import timezone

from lti_blogs.models import LtiToolConsumer


@ddt.ddt
class TestLtiToolConsumer(TestCase):
    """
    Unit tests for LtiToolConsumer model methods.
    """

    @ddt.data(
        (True, None, None, True),
        (False, None, None, False),
        (True, -1, None, True),
        (True, 1, None, False),
        (True, None, 1, True),
        (True, None, -1, False),
        (True, -1, 1, True),
    )
    @ddt.unpack
    def test_is_available(self, enabled, enable_from_days, enable_until_days, expected):
        now = timezone.now()
        consumer = LtiToolConsumer(
            name='Moodle',
            consumer_key='moodle.example.com',
            secret='secret',
            enabled=enabled,
            enable_from=now + timedelta(days=enable_from_days) if enable_from_days is not None else None,
            enable_until=now + timedelta(days=enable_until_days) if enable_until_days is not None else None,
        )

        self.assertEqual(consumer.is_available(now), expected)

    def test_str(self):
        consumer = LtiToolConsumer(name='Moodle', consumer_key='moodle.example.com', secret='secret')

        self.assertEqual(str(consumer), 'Moodle <moodle.example.com>')
        self.assertNotIn('secret', str(consumer))
