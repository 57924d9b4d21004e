"""
Admission of LTI launch requests.

Every inbound request goes through ``LaunchController.handle_launch``:

1. Requests that are not LTI basic launches, or that are not addressed to
   the primary site, are left alone.
2. The current session is destroyed and the launch is verified.
3. A student blog launch by a non-learner lists the student blogs of the course
   for the member of staff. Every other launch finds or creates the blog,
   grants the user a role on it and signs them in.
"""
import logging

from edx_django_utils.monitoring import set_custom_attribute

from lti_blogs.data import BLOG_TYPE_STUDENT
from lti_blogs.exceptions import SignatureVerificationFailed
from lti_blogs.handoff import SessionHandoffWorkflow
from lti_blogs.identity import IdentityResolver, clear_identity_cache
from lti_blogs.lti_1p1.exceptions import Lti1p1Error
from lti_blogs.lti_1p1.provider import LtiToolProvider, is_basic_launch_request
from lti_blogs.models import LtiToolConsumer
from lti_blogs.provisioners import get_provisioner
from lti_blogs.session import SessionState
from lti_blogs.utils import get_request_params, is_primary_site

log = logging.getLogger(__name__)


def is_student_blog_and_non_student(launch):
    """
    True when a member of staff launches a student blog placement.
    """
    return launch.context.requested_resource_type == BLOG_TYPE_STUDENT and not launch.roles.is_learner()


class LaunchController:
    """
    Runs an LTI launch from admission to sign-in.
    """
    def __init__(self, store, tool_provider=None, handoff=None):
        """
        Arguments:
            store (BlogStore): storage handle
            tool_provider (LtiToolProvider): launch verifier, one over the store's consumers by default
            handoff (SessionHandoffWorkflow): sign-in and staff view workflow
        """
        self.store = store
        self.tool_provider = tool_provider or LtiToolProvider(self.get_consumers())
        self.handoff = handoff or SessionHandoffWorkflow(store)

    def get_consumers(self):
        return LtiToolConsumer.objects.using(self.store.using)

    def is_launch_request(self, request):
        return is_basic_launch_request(get_request_params(request)) and is_primary_site(request)

    def handle_launch(self, request):
        """
        Handle a request if it is an LTI launch.

        Returns:
            HttpResponse, or None if the request is not an LTI launch

        Raises:
            SignatureVerificationFailed: if the launch cannot be verified
            DuplicateEmailError: if the user's account cannot be created
            PostSignInVerificationFailed: if signing the user in failed
        """
        if not self.is_launch_request(request):
            if 'lti_message_type' in get_request_params(request):
                log.debug("[LTI] Ignoring malformed launch or launch on a secondary site")
            return None

        clear_identity_cache()
        session_state = SessionState.reset(request)
        launch = self.verify(request, session_state)
        set_custom_attribute('lti_blogs.consumer_key', launch.consumer_key)

        if is_student_blog_and_non_student(launch):
            return self.handoff.show_student_blogs(request, session_state, launch)

        return self.provision_and_sign_in(request, session_state, launch)

    def verify(self, request, session_state):
        try:
            launch = self.tool_provider.handle_request(request, session_state)
        except Lti1p1Error as exc:
            log.warning("[LTI] Launch verification failed: %s", exc)
            raise SignatureVerificationFailed(str(exc)) from exc

        if not session_state.authenticated:
            log.warning("[LTI] Launch verification did not authenticate the session")
            raise SignatureVerificationFailed("The launch did not authenticate the session.")

        session_state.save(request.session)
        return launch

    def provision_and_sign_in(self, request, session_state, launch):
        """
        Find or create the user and blog of a launch, grant access and sign the user in.
        """
        with self.store.atomic():
            user = IdentityResolver(self.store).resolve_or_create(launch.identity)
            provisioner = get_provisioner(launch.context.requested_resource_type, self.store)
            blog_id = provisioner.get_or_create(launch.context, user)
            provisioner.grant_role(user, blog_id, launch.roles)

        return self.handoff.sign_in(request, session_state, user, self.store.get_blog(blog_id))
