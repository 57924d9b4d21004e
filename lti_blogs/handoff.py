"""
Hand-off from a verified LTI launch to a signed-in blog session.

Covers signing a user in to a blog, and the two step staff view of student
blogs: a staff launch stores the staff details in the session and lists the
student blogs of the course; following one of the links signs the member of
staff in to that blog.
"""
import logging
from urllib.parse import urlparse

from django.conf import settings
from django.contrib.auth import login
from django.http import HttpResponseRedirect
from django.http.request import validate_host
from django.shortcuts import render
from django.utils.cache import add_never_cache_headers
from django.utils.http import url_has_allowed_host_and_scheme

from lti_blogs.data import BLOG_TYPE_STUDENT
from lti_blogs.exceptions import PostSignInVerificationFailed, ResourceCourseMismatch, UnauthorizedStaffView
from lti_blogs.identity import IdentityResolver, clear_identity_cache
from lti_blogs.provisioners import get_provisioner
from lti_blogs.session import SessionState
from lti_blogs.signals import lti_user_signed_in
from lti_blogs.utils import get_blog_home_url, get_request_params, get_staff_view_url

log = logging.getLogger(__name__)

STAFF_VIEW_PARAMETER = 'lti_staff_view_blog'


def is_staff_view_request(params):
    return params.get(STAFF_VIEW_PARAMETER) == 'true'


def get_redirect_hosts(request, url):
    """
    Hosts ``url`` may redirect to: the request host, and the host of ``url`` if ALLOWED_HOSTS lists it.

    A ``'*'`` entry never allows a redirect host; blogs on their own subdomains
    need ``.example.com`` style entries.
    """
    hosts = {request.get_host()}
    parsed_url = urlparse(url)
    allowed_hosts = [host for host in settings.ALLOWED_HOSTS if host != '*']
    if parsed_url.hostname and validate_host(parsed_url.hostname, allowed_hosts):
        hosts.add(parsed_url.netloc)
    return hosts


def safe_redirect(request, url, fallback_url='/'):
    """
    Redirect to ``url`` if it stays on a host of this site, to ``fallback_url`` otherwise.
    """
    allowed_hosts = get_redirect_hosts(request, url)
    if not url_has_allowed_host_and_scheme(url, allowed_hosts=allowed_hosts, require_https=request.is_secure()):
        log.warning("Refusing to redirect to %r", url)
        url = fallback_url
    return HttpResponseRedirect(url)


class SessionHandoffWorkflow:
    """
    Signs users in to blogs and runs the staff view of student blogs.
    """
    def __init__(self, store):
        """
        Arguments:
            store (BlogStore): storage handle
        """
        self.store = store

    def sign_in(self, request, session_state, user, blog, staff_view=False):
        """
        Sign ``user`` in to ``blog`` and redirect to the blog home page.

        Raises:
            PostSignInVerificationFailed: if the request is not authenticated as
                ``user`` once signed in
        """
        session_state.current_blog_id = blog.pk
        clear_identity_cache()

        login(request, user, backend=settings.AUTHENTICATION_BACKENDS[0])
        session_state.save(request.session)

        signed_in_user = getattr(request, 'user', None)
        if not (signed_in_user and signed_in_user.is_authenticated
                and signed_in_user.pk == user.pk and user.is_active):
            raise PostSignInVerificationFailed(f"User {user.pk} is not signed in to blog {blog.pk}.")

        log.info("Signed in user %s to blog %s (staff view: %s)", user.pk, blog.pk, staff_view)
        lti_user_signed_in.send(sender=self.__class__, request=request, user=user, blog=blog, staff_view=staff_view)
        return safe_redirect(request, get_blog_home_url(blog))

    def show_student_blogs(self, request, session_state, launch):
        """
        Store the staff launch in the session and list the student blogs of its course placement.

        Nothing is created and no access is granted here.

        Arguments:
            request (django.http.HttpRequest): the staff launch
            session_state (SessionState): state of the launch session
            launch (VerifiedLaunch): the verified staff launch
        """
        context = launch.context
        session_state.set_staff_context(
            launch.identity,
            launch.roles,
            context.course_id,
            context.resource_link_id,
        )
        session_state.save(request.session)

        blogs = self.store.list_blogs(context.course_id, context.resource_link_id, BLOG_TYPE_STUDENT)
        log.info(
            "Listing %s student blogs of course %r, resource link %r for staff user %r",
            len(blogs),
            context.course_id,
            context.resource_link_id,
            launch.identity.username,
        )
        response = render(
            request,
            'lti_blogs/student_blogs.html',
            context={
                'course_title': context.course_title,
                'blogs': [
                    {'title': blog.title, 'url': get_staff_view_url(blog)}
                    for blog in blogs
                ],
            },
        )
        add_never_cache_headers(response)
        return response

    def add_staff_to_student_blog(self, request):
        """
        Sign a member of staff in to the student blog chosen from the list.

        Returns None unless the request carries the staff view marker.

        Raises:
            UnauthorizedStaffView: if the session holds no staff launch
            ResourceCourseMismatch: if the blog is not a blog of the staff launch's course
        """
        params = get_request_params(request)
        if not is_staff_view_request(params):
            return None

        session_state = SessionState.load(request.session)
        if not session_state.staff_mode:
            raise UnauthorizedStaffView("You do not have permission to view this page.")

        course_id = session_state.staff_course_id
        raw_blog_id = params.get('blog_id')
        try:
            blog_id = int(raw_blog_id)
        except (TypeError, ValueError) as err:
            raise ResourceCourseMismatch(raw_blog_id, course_id) from err

        if not self.store.is_course_blog(course_id, blog_id, BLOG_TYPE_STUDENT):
            raise ResourceCourseMismatch(blog_id, course_id)

        clear_identity_cache()
        with self.store.atomic():
            user = IdentityResolver(self.store).resolve_or_create(session_state.get_staff_identity())
            provisioner = get_provisioner(BLOG_TYPE_STUDENT, self.store)
            provisioner.grant_role(user, blog_id, session_state.get_staff_role_set())

        return self.sign_in(request, session_state, user, self.store.get_blog(blog_id), staff_view=True)

    def redirect_without_sign_in(self, request, blog_id):
        """
        Send the user to a blog's home page, or the site home, without signing them in.
        """
        try:
            blog = self.store.get_blog(int(blog_id))
        except (TypeError, ValueError):
            blog = None
        return safe_redirect(request, get_blog_home_url(blog) if blog else '/')
