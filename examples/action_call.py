#!/usr/bin/env python
#
# Show how to actually perform UPnP calls.
#

import tr064client

# Load the service tree of the gateway. The TR-064 actions need a user which
# is allowed to access the box settings.
root = tr064client.load_services(
    'http://fritz.box:49000', username='admin', password='secret')

# Find the 'GetAddonInfos' action of the WAN interface. A service type and an
# action name identify an action, since action names repeat across services.
action = root.get_action(
    'urn:schemas-upnp-org:service:WANCommonInterfaceConfig:1', 'GetAddonInfos')
print(action())
# Output: {'ByteSendRate': 2236, 'ByteReceiveRate': 10543, ...}

# Actions with input arguments take them as keywords, or as an ordered list
action = root.get_action(
    'urn:dslforum-org:service:Hosts:1', 'GetGenericHostEntry')
print(action.call([('NewIndex', 0)]))

# Faults reported by the device are raised as SOAPError
try:
    print(action.call([('NewIndex', 9999)]))
except tr064client.SOAPError as e:
    print(e.error_code, e.error_description)
