"""
Data structures shared by the launch pipeline: the verified launch context,
the identity attributes sent by the LMS, and the result of verifying a launch.
"""

from attrs import define, field, validators

from lti_blogs.lti_1p1.roles import RoleSet

BLOG_TYPE_COURSE = 'course'
BLOG_TYPE_STUDENT = 'student'
BLOG_TYPES = (BLOG_TYPE_COURSE, BLOG_TYPE_STUDENT)


@define(frozen=True)
class LaunchContext:
    """
    Course context of one LTI launch.

    * course_id (required): the ``context_label`` sent by the LMS, stable per course.
    * resource_link_id (required): stable per placement of the tool in a course.
    * course_title (optional): the ``context_title`` sent by the LMS.
    * requested_resource_type (optional): ``course``, ``student`` or empty when unset.
    * site_category (optional): category of blogs created from this launch, defaults to 1.
    """
    course_id = field(validator=validators.instance_of(str))
    resource_link_id = field(validator=validators.instance_of(str))
    course_title = field(default='')
    requested_resource_type = field(
        default='',
        validator=validators.in_(('',) + BLOG_TYPES),
    )
    site_category = field(default=1, converter=int)


@define(frozen=True)
class IdentityData:
    """
    User attributes sent by the LMS; not yet bound to an account.

    Stored in the session for the staff blog view, so every field is a plain string.
    """
    username = field(validator=validators.instance_of(str))
    email = field(default='')
    first_name = field(default='')
    last_name = field(default='')


@define(frozen=True)
class VerifiedLaunch:
    """
    Result of a successful launch verification.
    """
    identity = field(validator=validators.instance_of(IdentityData))
    roles = field(validator=validators.instance_of(RoleSet))
    context = field(validator=validators.instance_of(LaunchContext))
    consumer_key = field(default=None)
