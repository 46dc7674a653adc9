HTTP_TIMEOUT = 10

DEFAULT_BASE_URL = "http://fritz.box:49000"

# Primary (IGD) and secondary (TR-064) device descriptions
IGD_DESC_PATH = "/igddesc.xml"
TR64_DESC_PATH = "/tr64desc.xml"

SOAP_ENVELOPE_NS = "http://schemas.xmlsoap.org/soap/envelope/"
SOAP_ENCODING_STYLE = "http://schemas.xmlsoap.org/soap/encoding/"
SOAP_CONTENT_TYPE = 'text/xml; charset="utf-8"'
