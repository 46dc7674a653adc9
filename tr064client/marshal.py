import re

from .errors import DecodeError, UnknownDataType

UINT64_MAX = 2 ** 64 - 1
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


def parse_bool(value):
    return value == "1"


def _int_parser(v_min, v_max):
    # ASCII digits only; int() would also take whitespace, '_', '+' and non-latin digits
    pattern = re.compile(r"-?[0-9]+" if v_min < 0 else r"[0-9]+")

    def parse(value):
        if not pattern.fullmatch(value):
            raise ValueError("invalid literal %r" % value)
        v = int(value, 10)
        if not v_min <= v <= v_max:
            raise ValueError("%r is out of range %s to %s" % (value, v_min, v_max))
        return v

    return parse


# ui4 is decoded into 64 bits: some devices report counters that overflow 2^32.
MARSHAL_FUNCTIONS = (
    (("string",), str),
    (("boolean",), parse_bool),
    (("ui1", "ui2", "ui4"), _int_parser(0, UINT64_MAX)),
    (("i4",), _int_parser(INT64_MIN, INT64_MAX)),
    (("dateTime", "uuid"), str),
)


def marshal_value(datatype, value):
    """
    Convert the raw text of a SOAP response element into a Python value
    according to the `datatype` of its state variable.

    Raises UnknownDataType for data types we don't decode and DecodeError for
    values that don't parse as their data type.
    """
    for types, func in MARSHAL_FUNCTIONS:
        if datatype in types:
            try:
                return func(value)
            except ValueError as exc:
                raise DecodeError(
                    "Unable to decode %r as %r: %s" % (value, datatype, exc)
                )
    raise UnknownDataType("unknown datatype: %s (value %r)" % (datatype, value))


def render_value(value):
    """
    Render an argument value as the text content of a SOAP request element.
    """
    if isinstance(value, bool):
        return "1" if value else "0"
    if value is None:
        return ""
    return str(value)
