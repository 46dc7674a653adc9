# Copyright (c) 2012-2016, Ferry Boender <ferry.boender@gmail.com>
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in
# all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""
This module provides a UPnP / TR-064 control point for home gateways such as
the FRITZ!Box. It reads the gateway's service tree, calls actions over SOAP
and decodes the results into Python values, so that they can be republished
as metrics.

The usual flow for working with a gateway is:

- Load the service tree.

  The gateway publishes an IGD device description (/igddesc.xml) and a richer
  TR-064 description (/tr64desc.xml). Both are read, every embedded device is
  walked and the SCPD document of each service is fetched. The services of
  the TR-064 description replace IGD services of the same type. The result is
  a Root instance whose `services` dict is keyed by service type.

- Look up an Action.

  Root.get_action(service_type, action_name) returns an Action. Its
  `arguments` list their direction and the state variable that gives them a
  data type.

- Call an Action using SOAP.

  Action.call([(name, value), ...]) posts a SOAP envelope to the service's
  control URL. If the gateway asks for authentication, the request is resent
  once with an HTTP Digest `Authorization` header built from the Root's
  credentials. The response values are decoded according to their data type
  and returned as a dict keyed by state variable name.

------------------------------------------------------------------------------
import tr064client

root = tr064client.load_services(
    'http://fritz.box:49000', username='admin', password='secret')
action = root.get_action(
    'urn:schemas-upnp-org:service:WANCommonInterfaceConfig:1', 'GetAddonInfos')
print(action())
------------------------------------------------------------------------------

Useful Links:

* http://upnp.org/specs/arch/UPnP-arch-DeviceArchitecture-v1.1.pdf
* https://avm.de/service/schnittstellen/
"""
from tr064client import const, digest, dump, errors, marshal, soap, upnp, util  # noqa: F401
from .errors import (
    UPNPError,
    TransportError,
    MalformedDocumentError,
    UnresolvedReferenceError,
    AuthenticationRequired,
    UnsupportedDigestScheme,
    SOAPError,
    DecodeError,
    UnknownDataType,
    InvalidServiceException,
    InvalidActionException,
    ValidationError,
)
from .upnp import Root, Device, Service, Action, Argument, StateVariable, load_services

__all__ = [
    "Root", "Device", "Service", "Action", "Argument", "StateVariable", "load_services",
    "UPNPError", "TransportError", "MalformedDocumentError", "UnresolvedReferenceError",
    "AuthenticationRequired", "UnsupportedDigestScheme", "SOAPError", "DecodeError",
    "UnknownDataType", "InvalidServiceException", "InvalidActionException", "ValidationError",
]
