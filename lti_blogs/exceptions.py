"""
Exceptions for the LTI blogs launch pipeline.
"""


class LtiBlogsError(Exception):
    """
    General error class for LTI blog launches.
    """


class MalformedLaunch(LtiBlogsError):
    """
    The request is not a well-formed LTI basic launch.

    Never shown to the user: a malformed launch is simply not an LTI request
    and is passed through to the host application.
    """


class SignatureVerificationFailed(LtiBlogsError):
    """
    The launch could not be verified by the tool provider.
    """


class DuplicateEmailError(LtiBlogsError):
    """
    A new account could not be created because its email address is
    already used by another account.
    """
    def __init__(self, email, message=None):
        self.email = email
        super().__init__(message or f"Email address {email!r} is already used by another user.")


class UnauthorizedStaffView(LtiBlogsError):
    """
    A staff blog view was requested without a staff LTI session.
    """


class ResourceCourseMismatch(LtiBlogsError):
    """
    The blog requested for a staff view does not belong to the course
    stored in the staff session.
    """
    def __init__(self, blog_id, course_id):
        self.blog_id = blog_id
        self.course_id = course_id
        super().__init__(f"Blog {blog_id!r} does not belong to course {course_id!r}.")


class PostSignInVerificationFailed(LtiBlogsError):
    """
    Signing the user in did not leave the request authenticated.
    """
