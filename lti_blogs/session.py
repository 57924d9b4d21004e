"""
Session state of an LTI launch.

The state lives in the Django session under ``lti_blogs.*`` keys and is
passed around explicitly as a SessionState object. It is reset at the
start of every launch so a previous principal's session never leaks into
a new launch.
"""
import logging

from attrs import asdict, define, field, fields
from django.contrib.auth import logout

from lti_blogs.data import IdentityData
from lti_blogs.lti_1p1.roles import classify

log = logging.getLogger(__name__)

SESSION_KEY_PREFIX = 'lti_blogs.'


@define
class SessionState:
    """
    LTI data kept in the session between a launch and the requests that follow it.

    * authenticated: the launch was verified.
    * staff_mode: a member of staff is viewing the student blogs of a course.
    * staff_roles: raw LTI roles of the member of staff.
    * staff_identity: identity attributes of the member of staff, no account is created yet.
    * staff_course_id, staff_resource_link_id: course placement the staff launch came from.
    * current_blog_id: blog the user was last signed in to.
    """
    authenticated = field(default=False)
    staff_mode = field(default=False)
    staff_roles = field(factory=list)
    staff_identity = field(factory=dict)
    staff_course_id = field(default=None)
    staff_resource_link_id = field(default=None)
    current_blog_id = field(default=None)

    @classmethod
    def load(cls, session):
        """
        Read the LTI state from a Django session.
        """
        values = {}
        for attribute in fields(cls):
            key = SESSION_KEY_PREFIX + attribute.name
            if key in session:
                values[attribute.name] = session[key]
        return cls(**values)

    def save(self, session):
        """
        Write the LTI state into a Django session.
        """
        for name, value in asdict(self).items():
            session[SESSION_KEY_PREFIX + name] = value

    @classmethod
    def reset(cls, request):
        """
        Destroy the current session and start a new one.

        Logs the current user out and flushes the session, which also cycles
        the session key. Returns the state of the new, empty session.
        """
        log.debug("Resetting session %s for an LTI launch", request.session.session_key)
        logout(request)
        return cls()

    def set_staff_context(self, identity, role_set, course_id, resource_link_id):
        self.staff_mode = True
        self.staff_roles = list(role_set.raw_roles)
        self.staff_identity = asdict(identity)
        self.staff_course_id = course_id
        self.staff_resource_link_id = resource_link_id

    def get_staff_identity(self):
        return IdentityData(**self.staff_identity)

    def get_staff_role_set(self):
        return classify(self.staff_roles)
