import requests
from requests.compat import urlparse
from lxml import etree

from .util import _getLogger, _localname
from .const import (
    HTTP_TIMEOUT,
    SOAP_CONTENT_TYPE,
    SOAP_ENCODING_STYLE,
    SOAP_ENVELOPE_NS,
)
from .digest import digest_authorization
from .errors import (
    AuthenticationRequired,
    ERR_CODE_DESCRIPTIONS,
    MalformedDocumentError,
    SOAPError,
    TransportError,
    ValidationError,
)
from .marshal import render_value


class SOAP(object):
    """SOAP (Simple Object Access Protocol) implementation
    This class defines a simple SOAP client.

    The first request for an action is always sent without credentials. If the
    device answers 401 with a Digest challenge, the request is sent a second
    and last time with an `Authorization` header.
    """

    def __init__(self, url, service_type):
        self.url = url
        self.service_type = service_type
        self._log = _getLogger("SOAP")

    def build_envelope(self, action_name, arguments=None):
        """
        Return the serialized request envelope. `arguments` is an ordered
        sequence of (name, value) pairs.
        """
        envelope = etree.Element(
            etree.QName(SOAP_ENVELOPE_NS, "Envelope"), nsmap={"s": SOAP_ENVELOPE_NS}
        )
        envelope.set(etree.QName(SOAP_ENVELOPE_NS, "encodingStyle"), SOAP_ENCODING_STYLE)
        body = etree.SubElement(envelope, etree.QName(SOAP_ENVELOPE_NS, "Body"))
        action = etree.SubElement(
            body,
            etree.QName(self.service_type, action_name),
            nsmap={"u": self.service_type},
        )
        for name, value in arguments or ():
            try:
                etree.SubElement(action, name).text = render_value(value)
            except ValueError as exc:
                raise ValidationError({name: str(exc)}) from exc
        return etree.tostring(envelope, xml_declaration=True, encoding="utf-8")

    def _post(self, action_name, body, authorization=None, verify=False, timeout=HTTP_TIMEOUT):
        headers = {
            "Content-Type": SOAP_CONTENT_TYPE,
            "SOAPAction": "%s#%s" % (self.service_type, action_name),
        }
        if authorization is not None:
            headers["Authorization"] = authorization
        try:
            return requests.post(
                self.url, data=body, headers=headers, timeout=timeout, verify=verify
            )
        except requests.exceptions.RequestException as exc:
            raise TransportError("Unable to call %s on %s: %s" % (action_name, self.url, exc)) from exc

    def call(
        self,
        action_name,
        arguments=None,
        username=None,
        password=None,
        verify=False,
        timeout=HTTP_TIMEOUT,
    ):
        """
        Invoke `action_name` and return the parsed response envelope.
        """
        body = self.build_envelope(action_name, arguments)
        self._log.debug(">> %s %s", self.url, body)
        resp = self._post(action_name, body, verify=verify, timeout=timeout)

        if resp.status_code == 401:
            challenge = resp.headers.get("WWW-Authenticate")
            if username is None and password is None:
                resp.close()
                raise AuthenticationRequired(
                    "%s requires authentication but no credentials are configured"
                    % self.url
                )
            if challenge:
                resp.close()
                authorization = digest_authorization(
                    challenge, username or "", password, self._request_uri()
                )
                self._log.debug("Retrying %s with digest authentication", action_name)
                resp = self._post(
                    action_name,
                    body,
                    authorization=authorization,
                    verify=verify,
                    timeout=timeout,
                )

        if resp.status_code != 200:
            self._raise_for_status(resp)

        self._log.debug("<< %s %s", self.url, resp.content)
        return self.parse_envelope(resp.content)

    def _request_uri(self):
        parsed = urlparse(self.url)
        uri = parsed.path or "/"
        if parsed.query:
            uri += "?" + parsed.query
        return uri

    @staticmethod
    def parse_envelope(content):
        try:
            return etree.fromstring(content)
        except (etree.XMLSyntaxError, ValueError) as exc:
            raise MalformedDocumentError("Invalid SOAP response: %s" % exc) from exc

    @staticmethod
    def _raise_for_status(resp):
        status_text = "%s (%d)" % (resp.reason, resp.status_code)
        if resp.status_code != 500:
            raise TransportError(status_text, status_code=resp.status_code)

        try:
            root = etree.fromstring(resp.content)
        except (etree.XMLSyntaxError, ValueError):
            raise SOAPError(status_text, status_code=resp.status_code)

        fault = {}
        for node in root.iter():
            name = _localname(node)
            if name in ("faultstring", "errorCode", "errorDescription") and name not in fault:
                fault[name] = (node.text or "").strip()
        if not fault:
            raise SOAPError(status_text, status_code=resp.status_code)

        fault_string = fault.get("faultstring")
        error_code = fault.get("errorCode")
        try:
            error_code = int(error_code)
        except (TypeError, ValueError):
            pass
        error_description = fault.get("errorDescription")
        if error_description is None and isinstance(error_code, int):
            error_description = ERR_CODE_DESCRIPTIONS.get(error_code)

        if error_code is not None:
            message = "SOAPFault: %s %s (%s)" % (
                fault_string or "UPnPError",
                error_code,
                error_description,
            )
        else:
            message = "SOAPFault: %s" % fault_string
        raise SOAPError(
            message,
            error_code=error_code,
            error_description=error_description,
            fault_string=fault_string,
            status_code=resp.status_code,
        )
