"""
Classification of the roles sent by an LMS in an LTI 1.1 launch.

LMSs send roles in several shapes, all of which are accepted:

* short context role handles: ``Learner``, ``Instructor/GuestInstructor``
* LTI 1.0 URNs: ``urn:lti:role:ims/lis/Learner``, ``urn:lti:instrole:ims/lis/Student``,
  ``urn:lti:sysrole:ims/lis/SysAdmin``
* LIS v2 URIs: ``http://purl.imsglobal.org/vocab/lis/v2/membership#Learner``,
  ``http://purl.imsglobal.org/vocab/lis/v2/membership/Instructor#TeachingAssistant``

For more details see:
https://www.imsglobal.org/specs/ltiv1p1/implementation-guide#toc-27
"""
from attrs import define, field

ROLE_LEARNER = 'learner'
ROLE_INSTRUCTOR = 'instructor'
ROLE_ADMIN = 'admin'
ROLE_OTHER = 'other'

LTI_ROLE_URN_PREFIXES = (
    'urn:lti:role:ims/lis/',
    'urn:lti:instrole:ims/lis/',
    'urn:lti:sysrole:ims/lis/',
)
LIS_V2_ROLE_PREFIX = 'http://purl.imsglobal.org/vocab/lis/v2/'

# Principal role handle -> normalized role tag
LTI_ROLE_MAP = {
    'Learner': ROLE_LEARNER,
    'Student': ROLE_LEARNER,
    'Instructor': ROLE_INSTRUCTOR,
    'Faculty': ROLE_INSTRUCTOR,
    'ContentDeveloper': ROLE_INSTRUCTOR,
    'TeachingAssistant': ROLE_INSTRUCTOR,
    'Administrator': ROLE_ADMIN,
    'SysAdmin': ROLE_ADMIN,
}


def _split_roles(raw_roles):
    if raw_roles is None:
        return ()
    if isinstance(raw_roles, str):
        raw_roles = raw_roles.split(',')
    return tuple(role.strip() for role in raw_roles if role and role.strip())


def get_principal_role(role):
    """
    Return the principal role handle of a raw LTI role.

    Sub-roles are reduced to their principal role, so both
    ``urn:lti:role:ims/lis/Learner/NonCreditLearner`` and
    ``http://purl.imsglobal.org/vocab/lis/v2/membership/Learner#NonCreditLearner``
    give ``Learner``.
    """
    for prefix in LTI_ROLE_URN_PREFIXES:
        if role.startswith(prefix):
            return role[len(prefix):].split('/')[0]

    if role.startswith(LIS_V2_ROLE_PREFIX):
        vocabulary, _, name = role[len(LIS_V2_ROLE_PREFIX):].partition('#')
        vocabulary_parts = vocabulary.split('/')
        if vocabulary_parts[0] == 'membership' and len(vocabulary_parts) > 1:
            return vocabulary_parts[1]
        return name

    return role.split('/')[0]


@define(frozen=True)
class RoleSet:
    """
    Normalized set of LTI role tags.

    ``raw_roles`` keeps the roles as they were sent so the set can be stored
    in the session as a plain list and classified again later.
    """
    raw_roles = field(converter=tuple, default=())
    tags = field(converter=frozenset, default=frozenset())

    def is_learner(self):
        return ROLE_LEARNER in self.tags

    def is_instructor(self):
        return ROLE_INSTRUCTOR in self.tags

    def is_admin(self):
        """
        True for administrators and for instructor-family roles.
        """
        return ROLE_ADMIN in self.tags or ROLE_INSTRUCTOR in self.tags


def classify(raw_roles):
    """
    Build a RoleSet from the roles sent in an LTI launch.

    Arguments:
        raw_roles (list or str): role strings, or a comma separated string of roles
            as found in the ``roles`` launch parameter

    Returns:
        RoleSet: unknown roles are tagged as ``other``; this never fails.
    """
    roles = _split_roles(raw_roles)
    tags = {LTI_ROLE_MAP.get(get_principal_role(role), ROLE_OTHER) for role in roles}
    return RoleSet(raw_roles=roles, tags=tags)
