class AcceptanceError(Exception):
    """
    Custom exception thrown when an acceptance test step fails: the apply, a
    check, the import verification or the destroy check.
    """


class PreCheckError(AcceptanceError):
    """
    Custom exception thrown when the environment lacks a setting required by
    an acceptance test. The test is reported as skipped.
    """


class ConfigParseError(AcceptanceError):
    """
    Custom exception thrown when a test fixture is not valid HCL or references
    an unknown resource or attribute.
    """
