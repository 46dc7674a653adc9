from collections import OrderedDict

import requests
from requests.compat import urljoin
from lxml import etree

from .util import _getLogger, _findtext, _localname
from .const import HTTP_TIMEOUT, IGD_DESC_PATH, TR64_DESC_PATH
from .soap import SOAP
from .marshal import marshal_value
from .errors import (
    InvalidActionException,
    InvalidServiceException,
    MalformedDocumentError,
    TransportError,
    UnresolvedReferenceError,
    ValidationError,
)


class CallActionMixin(object):
    def __call__(self, action_name, **kwargs):
        """
        Convenience method for quickly finding and calling an Action on a
        Service. Must have implemented a `find_action(action_name)` method.
        """
        action = self.find_action(action_name)
        if action is not None:
            return action(**kwargs)
        raise InvalidActionException(
            "Action with name %r does not exist." % action_name
        )


class Root(CallActionMixin):
    """
    The root of a gateway's UPnP tree. Holds the connection settings and,
    once loaded, every service of the IGD and TR-064 device descriptions
    indexed by service type.

    Example:

    >>> root = Root('http://fritz.box:49000', username='admin', password='secret')
    >>> root.load()
    >>> action = root.get_action(
    ...     'urn:schemas-upnp-org:service:WANCommonInterfaceConfig:1',
    ...     'GetTotalPacketsSent')
    >>> action()
    {'TotalPacketsSent': 123456}
    """

    def __init__(
        self,
        base_url,
        username=None,
        password=None,
        verify_tls=False,
        timeout=HTTP_TIMEOUT,
        load_tr64=True,
    ):
        self.base_url = base_url.rstrip("/")
        self.username = username
        self.password = password
        self.verify_tls = verify_tls
        self.timeout = timeout
        self.load_tr64 = load_tr64

        self.devices = []
        self.services = {}
        self._log = _getLogger("Root")

    def __repr__(self):
        return "<Root '%s'>" % (self.base_url)

    def __getitem__(self, key):
        """
        Allow Services to be returned as dictionary keys of the Root.
        """
        return self.services[key]

    @property
    def device(self):
        """
        The root device of the first description loaded.
        """
        return self.devices[0] if self.devices else None

    def url(self, path):
        """
        Resolve a URL from a description document. Absolute paths are
        appended to the base URL, so a path prefix in it is kept.
        """
        if path.startswith("/"):
            return self.base_url + path
        return urljoin(self.base_url + "/", path)

    def get_xml(self, url):
        """
        Fetch and parse an XML document. Raises TransportError or
        MalformedDocumentError.
        """
        self._log.debug("Reading %s", url)
        try:
            resp = requests.get(url, timeout=self.timeout, verify=self.verify_tls)
            resp.raise_for_status()
        except requests.exceptions.RequestException as exc:
            raise TransportError(
                "Unable to fetch %s: %s" % (url, exc),
                status_code=getattr(exc.response, "status_code", None),
            ) from exc
        try:
            return etree.fromstring(resp.content)
        except (etree.XMLSyntaxError, ValueError) as exc:
            raise MalformedDocumentError("Invalid XML in %s: %s" % (url, exc)) from exc

    def _load_description(self, path):
        url = self.url(path)
        xml = self.get_xml(url)
        node = xml.find("device", namespaces=xml.nsmap)
        if node is None:
            raise MalformedDocumentError("No <device> element in %s" % url)
        return Device.from_element(self, node)

    def load(self):
        """
        Load the IGD description and, unless disabled, the TR-064 description
        layered on top of it, then every service description they refer to.
        Nothing is replaced unless everything loads.
        """
        paths = [IGD_DESC_PATH]
        if self.load_tr64:
            paths.append(TR64_DESC_PATH)

        devices = []
        services = {}
        for path in paths:
            device = self._load_description(path)
            for svc in device.all_services():
                svc.load()
                if svc.service_type in services:
                    self._log.debug(
                        "%s: Service %r from %s replaces an earlier definition",
                        self.base_url, svc.service_type, path,
                    )
                services[svc.service_type] = svc
            devices.append(device)

        self.devices = devices
        self.services = services
        self._log.debug("%s: %d services loaded", self.base_url, len(services))
        return self

    def find_service(self, service_type):
        return self.services.get(service_type)

    def get_service(self, service_type):
        try:
            return self.services[service_type]
        except KeyError:
            raise InvalidServiceException("service %s not found" % service_type)

    def get_action(self, service_type, action_name):
        service = self.get_service(service_type)
        action = service.find_action(action_name)
        if action is None:
            raise InvalidActionException(
                "action %s not found in service %s" % (action_name, service_type)
            )
        return action

    def find_action(self, action_name):
        """Find an action by name.
        Convenience method that searches through all the services of the Root
        for an action and returns an Action instance. If the action is not
        found, returns None. If multiple actions with the same name are found
        it returns the one of the first service type in sorted order.
        """
        for service_type in sorted(self.services):
            action = self.services[service_type].find_action(action_name)
            if action is not None:
                return action

    def call(self, service_type, action_name, arguments=None):
        return self.get_action(service_type, action_name).call(arguments)


class Device(object):
    """
    UPnP Device representation. A device exposes services and may embed
    further devices.
    """

    def __init__(
        self,
        root,
        device_type="",
        friendly_name="",
        manufacturer="",
        manufacturer_url="",
        model_description="",
        model_name="",
        model_number="",
        model_url="",
        serial_number="",
        udn="",
        presentation_url="",
    ):
        self.root = root
        self.device_type = device_type
        self.friendly_name = friendly_name
        self.manufacturer = manufacturer
        self.manufacturer_url = manufacturer_url
        self.model_description = model_description
        self.model_name = model_name
        self.model_number = model_number
        self.model_url = model_url
        self.serial_number = serial_number
        self.udn = udn
        self.presentation_url = presentation_url

        self.services = []
        self.devices = []

    def __repr__(self):
        return "<Device '%s'>" % (self.friendly_name)

    @classmethod
    def from_element(cls, root, node):
        """
        Build a Device, its services and embedded devices from a <device>
        element of a device description.
        """
        device = cls(
            root,
            device_type=_findtext(node, "deviceType"),
            friendly_name=_findtext(node, "friendlyName"),
            manufacturer=_findtext(node, "manufacturer"),
            manufacturer_url=_findtext(node, "manufacturerURL"),
            model_description=_findtext(node, "modelDescription"),
            model_name=_findtext(node, "modelName"),
            model_number=_findtext(node, "modelNumber"),
            model_url=_findtext(node, "modelURL"),
            serial_number=_findtext(node, "serialNumber"),
            udn=_findtext(node, "UDN"),
            presentation_url=_findtext(node, "presentationURL"),
        )
        for svc_node in node.findall("serviceList/service", namespaces=node.nsmap):
            svc = Service(
                device,
                _findtext(svc_node, "serviceType"),
                _findtext(svc_node, "serviceId"),
                _findtext(svc_node, "controlURL"),
                _findtext(svc_node, "SCPDURL"),
                _findtext(svc_node, "eventSubURL"),
            )
            device.services.append(svc)
        for dev_node in node.findall("deviceList/device", namespaces=node.nsmap):
            device.devices.append(cls.from_element(root, dev_node))
        return device

    def iter_devices(self):
        """
        Yield this device and every embedded device, depth first.
        """
        yield self
        for child in self.devices:
            for device in child.iter_devices():
                yield device

    def all_services(self):
        return [svc for device in self.iter_devices() for svc in device.services]


class Service(CallActionMixin):
    """
    Service Control Point Definition. This class reads an SCPD XML file and
    parses the actions and state variables. It can then be used to call
    actions.
    """

    def __init__(
        self,
        device,
        service_type,
        service_id,
        control_url,
        scpd_url,
        event_sub_url="",
    ):
        self.device = device
        self.service_type = service_type
        self.service_id = service_id
        self.control_url = control_url
        self.scpd_url = scpd_url
        self.event_sub_url = event_sub_url

        self.actions = ()
        self.action_map = {}
        self.state_variables = ()
        self.statevar_map = {}
        self._log = _getLogger("Service")

    def __repr__(self):
        return "<Service service_id='%s'>" % (self.service_id)

    def __getitem__(self, key):
        """
        Allow Actions to be returned as dictionary keys of the Service.
        """
        return self.action_map[key]

    @property
    def root(self):
        return self.device.root

    @property
    def name(self):
        try:
            return self.service_id[self.service_id.rindex(":") + 1:]
        except ValueError:
            return self.service_id

    @property
    def full_control_url(self):
        return self.root.url(self.control_url)

    @property
    def full_scpd_url(self):
        return self.root.url(self.scpd_url)

    def load(self):
        """
        Fetch the SCPD document and read the state variables and actions.
        """
        self._log.debug("%s SCPDURL: %s", self.service_id, self.scpd_url)
        self._log.debug("%s controlURL: %s", self.service_id, self.control_url)
        scpd = self.root.get_xml(self.full_scpd_url)
        self._read_state_vars(scpd)
        self._read_actions(scpd)

    def _read_state_vars(self, scpd):
        state_variables = []
        for statevar_node in scpd.findall(
            "serviceStateTable/stateVariable", namespaces=scpd.nsmap
        ):
            findall = statevar_node.findall
            statevar = StateVariable(
                _findtext(statevar_node, "name"),
                _findtext(statevar_node, "dataType"),
                default_value=statevar_node.findtext(
                    "defaultValue", namespaces=statevar_node.nsmap
                ),
                allowed_values=[
                    e.text
                    for e in findall(
                        "allowedValueList/allowedValue", namespaces=statevar_node.nsmap
                    )
                ],
                send_events=statevar_node.attrib.get("sendEvents", "yes").lower() == "yes",
            )
            state_variables.append(statevar)
        self.state_variables = tuple(state_variables)
        self.statevar_map = {sv.name: sv for sv in state_variables}

    def _read_actions(self, scpd):
        actions = []
        for action_node in scpd.findall("actionList/action", namespaces=scpd.nsmap):
            name = _findtext(action_node, "name")
            arguments = []
            for arg_node in action_node.findall(
                "argumentList/argument", namespaces=action_node.nsmap
            ):
                arg_name = _findtext(arg_node, "name")
                related = _findtext(arg_node, "relatedStateVariable")
                try:
                    statevar = self.statevar_map[related]
                except KeyError:
                    raise UnresolvedReferenceError(
                        "%s: argument %r of action %r refers to unknown state variable %r"
                        % (self.service_type, arg_name, name, related)
                    )
                arguments.append(
                    Argument(
                        arg_name,
                        _findtext(arg_node, "direction").lower(),
                        related,
                        statevar,
                    )
                )
            actions.append(Action(self, name, arguments))
        self.actions = tuple(actions)
        self.action_map = {a.name: a for a in actions}

    def find_action(self, action_name):
        return self.action_map.get(action_name)


class StateVariable(object):
    def __init__(
        self, name, datatype, default_value=None, allowed_values=None, send_events=True
    ):
        self.name = name
        self.datatype = datatype
        self.default_value = default_value
        self.allowed_values = allowed_values or []
        self.send_events = send_events

    def __repr__(self):
        return "<StateVariable '%s' (%s)>" % (self.name, self.datatype)


class Argument(object):
    def __init__(self, name, direction, related_state_variable, state_variable=None):
        self.name = name
        self.direction = direction
        self.related_state_variable = related_state_variable
        self.state_variable = state_variable

    def __repr__(self):
        return "<Argument '%s' [%s]>" % (self.name, self.direction)


class Action(object):
    def __init__(self, service, name, arguments=None):
        self.service = service
        self.name = name
        self.arguments = tuple(arguments or ())
        self.argument_map = {arg.name: arg for arg in self.arguments}
        self._log = _getLogger("Action")

    def __repr__(self):
        return "<Action '%s'>" % (self.name)

    def __call__(self, **kwargs):
        # Keyword arguments are sent in the order the SCPD lists them
        declared = [arg.name for arg in self.argsdef_in]
        ordered = OrderedDict((name, kwargs[name]) for name in declared if name in kwargs)
        for name, value in kwargs.items():
            if name not in ordered:
                ordered[name] = value
        return self.call(ordered)

    @property
    def argsdef_in(self):
        return [arg for arg in self.arguments if arg.direction == "in"]

    @property
    def argsdef_out(self):
        return [arg for arg in self.arguments if arg.direction != "in"]

    @property
    def is_read_only(self):
        """
        Whether the action looks like a query: no input arguments and at least
        one argument.
        """
        return not self.argsdef_in and len(self.arguments) > 0

    def call(self, arguments=None):
        """
        Invoke the action. `arguments` is an ordered sequence of (name, value)
        pairs, or a mapping. Returns a dict of decoded output values keyed by
        state variable name.
        """
        if hasattr(arguments, "items"):
            arguments = list(arguments.items())
        arguments = list(arguments or ())
        self._validate_arguments(arguments)

        root = self.service.root
        soap = SOAP(self.service.full_control_url, self.service.service_type)
        self._log.debug(">> %s (%s)", self.name, arguments)
        response = soap.call(
            self.name,
            arguments,
            username=root.username,
            password=root.password,
            verify=root.verify_tls,
            timeout=root.timeout,
        )
        result = self._marshal_values(response)
        self._log.debug("<< %s: %s", self.name, result)
        return result

    def _validate_arguments(self, arguments):
        reasons = {}
        for name, _ in arguments:
            arg = self.argument_map.get(name)
            if arg is None:
                reasons[name] = "not an argument of %s" % self.name
            elif arg.direction != "in":
                reasons[name] = "not an input argument of %s" % self.name
        if reasons:
            raise ValidationError(reasons)

    def _marshal_values(self, response):
        """
        Decode every response element named after one of our output
        arguments. Other elements are ignored.
        """
        out = {}
        for node in response.iter():
            arg = self.argument_map.get(_localname(node))
            if arg is None or arg.direction == "in":
                continue
            statevar = arg.state_variable
            out[statevar.name] = marshal_value(statevar.datatype, node.text or "")
        return out


def load_services(
    base_url,
    username=None,
    password=None,
    verify_tls=False,
    timeout=HTTP_TIMEOUT,
    load_tr64=True,
):
    """
    Load the service tree of the device at `base_url`.
    """
    root = Root(
        base_url,
        username=username,
        password=password,
        verify_tls=verify_tls,
        timeout=timeout,
        load_tr64=load_tr64,
    )
    return root.load()
