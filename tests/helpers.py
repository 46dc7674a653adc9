import mock
import requests
from requests.compat import urlparse
from requests.structures import CaseInsensitiveDict

from tests.const import BASE_URL, FOO, TEST_FOO_SCPD

import tr064client as upnp


def mock_response(status_code=200, content=b"", headers=None, reason="OK"):
    """Mock of a `requests.Response` as returned by `requests.get/post`."""
    resp = mock.Mock()
    resp.status_code = status_code
    resp.content = content
    resp.reason = reason
    resp.headers = CaseInsensitiveDict(headers or {})
    if status_code >= 400:
        exc = requests.exceptions.HTTPError("%s %s" % (status_code, reason), response=resp)
        resp.raise_for_status.side_effect = exc
    return resp


class DocumentServer(object):
    """
    Side effect for a patched `requests.get` that serves documents by URL
    path. Unknown paths are answered with 404.
    """

    def __init__(self, documents):
        self.documents = documents
        self.requested = []

    def __call__(self, url, **kwargs):
        path = urlparse(url).path
        self.requested.append(path)
        if path not in self.documents:
            return mock_response(404, reason="Not Found")
        return mock_response(content=self.documents[path])


def foo_service(username=None, password=None):
    """
    Build the `Foo` service by parsing TEST_FOO_SCPD without any HTTP.
    """
    root = upnp.Root(BASE_URL, username=username, password=password)
    device = upnp.Device(root, friendly_name="Foo Gateway")
    service = upnp.Service(
        device, FOO, "urn:example-com:serviceId:Foo1", "/upnp/control/foo", "/fooSCPD.xml"
    )
    device.services.append(service)
    with mock.patch("requests.get", return_value=mock_response(content=TEST_FOO_SCPD)):
        service.load()
    root.devices.append(device)
    root.services[FOO] = service
    return service
