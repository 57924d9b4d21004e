"""
Middleware hooking LTI launches into the host site.

Add ``lti_blogs.middleware.LtiLaunchMiddleware`` to MIDDLEWARE after
SessionMiddleware and AuthenticationMiddleware. Requests that are neither LTI
launches nor staff blog views are passed through untouched.
"""
import logging

from django.shortcuts import render
from django.utils.cache import add_never_cache_headers
from django.utils.html import format_html

from lti_blogs.exceptions import (
    DuplicateEmailError,
    PostSignInVerificationFailed,
    ResourceCourseMismatch,
    SignatureVerificationFailed,
    UnauthorizedStaffView,
)
from lti_blogs.launch import LaunchController
from lti_blogs.storage import BlogStore
from lti_blogs.utils import get_auth_failure_status, get_helpline_url

log = logging.getLogger(__name__)

LAUNCH_ERROR_TEMPLATE = 'lti_blogs/lti_launch_error.html'


def render_launch_error(request, error_msg, status):
    response = render(request, LAUNCH_ERROR_TEMPLATE, context={'error_msg': error_msg}, status=status)
    add_never_cache_headers(response)
    return response


def get_duplicate_email_message():
    helpline_url = get_helpline_url()
    if not helpline_url:
        return 'This Email address is already being used by another user. Please contact IS Helpline for assistance.'
    return format_html(
        'This Email address is already being used by another user. '
        'Please contact <a href="{}">IS Helpline</a> for assistance.',
        helpline_url,
    )


class LtiLaunchMiddleware:
    """
    Runs LTI launches and staff blog views before the host site sees the request.
    """
    def __init__(self, get_response, store=None):
        self.get_response = get_response
        self.store = store or BlogStore()

    def __call__(self, request):
        response = self.process_lti_request(request)
        if response is not None:
            return response
        return self.get_response(request)

    def process_lti_request(self, request):
        """
        Returns the response for an LTI launch or staff blog view, None for any other request.
        """
        controller = LaunchController(self.store)
        try:
            response = controller.handle_launch(request)
            if response is None:
                response = controller.handoff.add_staff_to_student_blog(request)
            return response
        except SignatureVerificationFailed:
            return render_launch_error(
                request,
                'There is a problem with your lti connection.',
                get_auth_failure_status(),
            )
        except DuplicateEmailError as exc:
            log.info("Rejected LTI launch for an email address already in use: %s", exc)
            return render_launch_error(request, get_duplicate_email_message(), 409)
        except UnauthorizedStaffView as exc:
            log.info("Rejected staff blog view without a staff LTI session: %s", exc)
            return render_launch_error(request, 'You do not have permission to view this page.', 403)
        except ResourceCourseMismatch as exc:
            log.warning("Staff blog view outside of the launch course: %s", exc)
            return controller.handoff.redirect_without_sign_in(request, exc.blog_id)
        except PostSignInVerificationFailed as exc:
            log.exception("LTI sign-in did not authenticate the user: %s", exc)
            return render_launch_error(request, 'There is a problem with your lti connection.', 500)
