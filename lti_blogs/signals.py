"""
Signals sent by the LTI launch pipeline.
"""
from django.dispatch import Signal

# Sent when a launch creates a new blog. Arguments: blog, user
blog_created = Signal()

# Sent after a launch signed a user in to a blog. Arguments: request, user, blog, staff_view
lti_user_signed_in = Signal()
