class UPNPError(Exception):
    """
    Exception class for UPnP errors.
    """

    pass


class TransportError(UPNPError):
    """
    A description document or control URL could not be reached, or answered
    with an unexpected HTTP status.
    """

    def __init__(self, message, status_code=None):
        super(TransportError, self).__init__(message)
        self.status_code = status_code


class MalformedDocumentError(UPNPError):
    """
    An XML document failed to parse or lacks a required element.
    """

    pass


class UnresolvedReferenceError(UPNPError):
    """
    An action argument refers to a state variable its service doesn't declare.
    """

    pass


class AuthenticationRequired(UPNPError):
    """
    The device answered 401 and no credentials were configured.
    """

    pass


class UnsupportedDigestScheme(UPNPError):
    """
    The authentication challenge asks for something other than Digest MD5 with
    qop=auth.
    """

    pass


class SOAPError(UPNPError):
    """
    The device answered with a SOAP fault.
    """

    def __init__(
        self,
        message,
        error_code=None,
        error_description=None,
        fault_string=None,
        status_code=None,
    ):
        super(SOAPError, self).__init__(message)
        self.error_code = error_code
        self.error_description = error_description
        self.fault_string = fault_string
        self.status_code = status_code


class DecodeError(UPNPError):
    """
    A response value couldn't be converted to its declared data type.
    """

    pass


class UnknownDataType(DecodeError):
    pass


class InvalidServiceException(UPNPError):
    """
    Service doesn't exist.
    """

    pass


class InvalidActionException(UPNPError):
    """
    Action doesn't exist.
    """

    pass


class ValidationError(UPNPError):
    """
    Given arguments didn't validate against the action definition.
    """

    def __init__(self, reasons):
        super(ValidationError, self).__init__(
            "; ".join("%s: %s" % (k, v) for k, v in sorted(reasons.items()))
        )
        self.reasons = reasons


class UPnPErrorCodeDescriptions(object):
    """
    Standard descriptions of the UPnP control error codes, keyed by integer
    code. Ranges reserved by the UPnP Forum return the text for the range.
    """

    _descriptions = {
        401: "No action by that name at this service.",
        402: (
            "Could be any of the following: not enough in args, args in the "
            "wrong order, one or more in args are of the wrong data type."
        ),
        403: "The current state of the service prevents invoking that action.",
        501: "The current state of the service prevents invoking that action.",
        600: "The argument value is invalid.",
        601: (
            "An argument value is less than the minimum or more than the "
            "maximum value of the allowed value range, or is not in the "
            "allowed value list."
        ),
        602: "The requested action is optional and is not implemented by the device.",
        603: (
            "The device does not have sufficient memory available to complete "
            "the action."
        ),
        604: (
            "The device has encountered an error condition which it cannot "
            "resolve itself and required human intervention such as a reset "
            "or power cycle."
        ),
        605: "A string argument is too long for the device to handle properly.",
    }

    def __getitem__(self, key):
        if not isinstance(key, int):
            raise KeyError("'key' must be an integer")
        if 606 <= key <= 612:
            return "These ErrorCodes are reserved for UPnP DeviceSecurity."
        elif 613 <= key <= 699:
            return "Common action errors. Defined by UPnP Forum Technical Committee."
        elif 700 <= key <= 799:
            return "Action-specific errors defined by UPnP Forum working committee."
        elif 800 <= key <= 899:
            return "Action-specific errors for non-standard actions. Defined by UPnP vendor."
        return self._descriptions[key]

    def get(self, key, default=None):
        try:
            return self[key]
        except KeyError:
            return default


ERR_CODE_DESCRIPTIONS = UPnPErrorCodeDescriptions()
