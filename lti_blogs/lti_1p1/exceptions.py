"""
Exceptions for the LTI 1.1 tool provider.
"""


class Lti1p1Error(Exception):
    """
    General error class for LTI 1.1 tool provider usage.
    """


class InvalidLaunchSignature(Lti1p1Error):
    """
    The OAuth signature, consumer key, timestamp or nonce of a launch was rejected.
    """


class ConsumerNotEnabled(Lti1p1Error):
    """
    The tool consumer exists but is disabled or outside its enabled window.
    """


class MissingLaunchParameter(Lti1p1Error):
    """
    A launch parameter required to identify the user or course is missing.
    """
