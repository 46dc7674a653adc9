"""
Human readable listing of a loaded service tree, and starting-point metric
definitions for every value the device can be queried for.
"""
import sys

from .errors import UPNPError


def _sorted_actions(root):
    for service_type in sorted(root.services):
        service = root.services[service_type]
        for name in sorted(service.action_map):
            yield service_type, service, service.action_map[name]


def dump_services(root, out=sys.stdout, call_actions=True):
    """
    Print every service, action and argument of `root`. Read-only actions are
    called and their results printed unless `call_actions` is False.
    """
    current = None
    for service_type, service, action in _sorted_actions(root):
        if service_type != current:
            print("Service: %s (Url: %s)" % (service_type, service.control_url), file=out)
            current = service_type

        print(
            "  %s - arguments: variable [direction] (soap name, soap type)" % action.name,
            file=out,
        )
        for arg in action.arguments:
            print(
                "    %s [%s] (%s, %s)"
                % (
                    arg.related_state_variable,
                    arg.direction,
                    arg.name,
                    arg.state_variable.datatype,
                ),
                file=out,
            )

        if not action.is_read_only:
            print(
                "  %s - not calling, since arguments required or no output" % action.name,
                file=out,
            )
            continue
        if not call_actions:
            continue

        print("  %s - calling - results: variable: value" % action.name, file=out)
        try:
            result = action.call()
        except UPNPError as exc:
            print("    FAILED:%s" % exc, file=out)
            continue
        for arg in action.arguments:
            print(
                "    %s: %s" % (arg.related_state_variable, result.get(arg.state_variable.name)),
                file=out,
            )


def metric_templates(root):
    """
    One {"service", "action", "result"} entry per argument of every read-only
    action, sorted by service type and action name.
    """
    templates = []
    for service_type, _, action in _sorted_actions(root):
        if not action.is_read_only:
            continue
        for arg in action.arguments:
            templates.append(
                {
                    "service": service_type,
                    "action": action.name,
                    "result": arg.related_state_variable,
                }
            )
    return templates
