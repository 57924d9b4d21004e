"""
LTI 1.1 tool provider: recognises basic launch requests, verifies them and
extracts the identity, roles and course context they carry.

For the LTI 1.1 specification see:
https://www.imsglobal.org/specs/ltiv1p1
"""
import logging

from edx_django_utils.monitoring import function_trace

from lti_blogs.data import BLOG_TYPES, IdentityData, LaunchContext, VerifiedLaunch
from lti_blogs.models import LtiToolConsumer
from lti_blogs.utils import get_default_site_category, get_request_params

from .exceptions import ConsumerNotEnabled, MissingLaunchParameter
from .oauth import verify_launch_signature
from .roles import classify

log = logging.getLogger(__name__)

LTI_MESSAGE_TYPE = 'basic-lti-launch-request'
LTI_VERSION = 'LTI-1p0'

LTI_REQUIRED_PARAMETERS = [
    'lti_message_type',
    'lti_version',
    'oauth_consumer_key',
    'resource_link_id',
]


def is_basic_launch_request(params):
    """
    Returns True if the parameters describe an LTI 1.1 basic launch.

    Arguments:
        params (dict): request parameters
    """
    return (
        params.get('lti_message_type') == LTI_MESSAGE_TYPE
        and params.get('lti_version') == LTI_VERSION
        and 'oauth_consumer_key' in params
        and 'resource_link_id' in params
    )


def get_launch_username(params):
    """
    Returns the username sent in a launch.

    The LTI specification puts it in ``lis_person_sourcedid``, but Moodle
    sends ``ext_user_username`` instead.
    """
    return params.get('lis_person_sourcedid') or params.get('ext_user_username') or ''


def get_site_category(params):
    raw_site_category = params.get('custom_site_category')
    if raw_site_category in (None, ''):
        return get_default_site_category()
    try:
        site_category = int(raw_site_category)
    except (TypeError, ValueError):
        site_category = None
    if site_category is None or site_category < 1:
        log.warning("[LTI] Ignoring invalid custom_site_category %r", raw_site_category)
        return get_default_site_category()
    return site_category


def get_requested_blog_type(params):
    blog_type = params.get('custom_blog_type', '') or ''
    if blog_type and blog_type not in BLOG_TYPES:
        log.warning("[LTI] Unknown custom_blog_type %r, using the course blog", blog_type)
        return ''
    return blog_type


class LtiToolProvider:
    """
    Verifies LTI 1.1 launches sent by the registered tool consumers.
    """
    def __init__(self, consumers=None):
        """
        Arguments:
            consumers (QuerySet): tool consumers allowed to launch, all of them by default
        """
        self.consumers = consumers if consumers is not None else LtiToolConsumer.objects.all()

    @function_trace('lti_blogs.verify_launch')
    def handle_request(self, request, session_state):
        """
        Verify a launch request and mark the session as authenticated.

        Arguments:
            request (django.http.HttpRequest): an LTI basic launch request
            session_state (SessionState): state of the freshly reset session

        Returns:
            VerifiedLaunch: identity, roles and course context of the launch

        Raises:
            Lti1p1Error: if the launch cannot be verified
        """
        client_key = verify_launch_signature(request, self.consumers)

        consumer = self.consumers.filter(consumer_key=client_key).first()
        if consumer is None or not consumer.is_available():
            raise ConsumerNotEnabled(f"Tool consumer {client_key!r} is not enabled.")

        launch = self.get_verified_launch(get_request_params(request), client_key)
        session_state.authenticated = True
        return launch

    def get_verified_launch(self, params, consumer_key=None):
        """
        Build the launch data from verified request parameters.

        Raises:
            MissingLaunchParameter: if the launch has no username or course
        """
        username = get_launch_username(params)
        if not username:
            raise MissingLaunchParameter("Neither lis_person_sourcedid nor ext_user_username was sent.")

        course_id = params.get('context_label', '')
        if not course_id:
            raise MissingLaunchParameter("The context_label parameter was not sent.")

        identity = IdentityData(
            username=username,
            email=params.get('lis_person_contact_email_primary', ''),
            first_name=params.get('lis_person_name_given', ''),
            last_name=params.get('lis_person_name_family', ''),
        )
        context = LaunchContext(
            course_id=course_id,
            resource_link_id=params['resource_link_id'],
            course_title=params.get('context_title', ''),
            requested_resource_type=get_requested_blog_type(params),
            site_category=get_site_category(params),
        )
        return VerifiedLaunch(
            identity=identity,
            roles=classify(params.get('roles', '')),
            context=context,
            consumer_key=consumer_key,
        )
