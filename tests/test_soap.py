import hashlib
import unittest

import mock
import requests
from lxml import etree
from requests.utils import parse_dict_header

import tr064client as upnp
from tests.const import (
    FOO,
    TEST_CALLACTION_UPNPERROR,
    TEST_GETFOO_RESPONSE,
    TEST_MISSING_ERROR_DESCRIPTION_ELEMENT,
)
from tests.helpers import mock_response

URL = "http://fritz.box:49000/upnp/control/foo"
SOAP_NS = "http://schemas.xmlsoap.org/soap/envelope/"


class EndPrematurelyException(Exception):
    pass


def md5(s):
    return hashlib.md5(s.encode("utf-8")).hexdigest()


class TestSOAP(unittest.TestCase):
    def setUp(self):
        self.soap = upnp.soap.SOAP(URL, FOO)

    def test_envelope(self):
        """
        The body element should be named after the action, namespaced with the
        service type, with one child per argument in the given order.
        """
        body = self.soap.build_envelope("SetFoo", [("NewFoo", "a<b&c"), ("NewIndex", 3)])
        tree = etree.fromstring(body)
        self.assertEqual(tree.tag, "{%s}Envelope" % SOAP_NS)
        action = tree.find("{%s}Body/{%s}SetFoo" % (SOAP_NS, FOO))
        self.assertIsNotNone(action)
        self.assertEqual([c.tag for c in action], ["NewFoo", "NewIndex"])
        self.assertEqual(action[0].text, "a<b&c")
        self.assertEqual(action[1].text, "3")
        self.assertIn(b"a&lt;b&amp;c", body)

    def test_envelope_invalid_value(self):
        """
        Values that can't be carried in XML are rejected before anything is sent.
        """
        with self.assertRaises(upnp.ValidationError) as ctx:
            self.soap.build_envelope("SetFoo", [("NewFoo", "a\x00b")])
        self.assertIn("NewFoo", ctx.exception.reasons)

    @mock.patch("requests.post")
    def test_call_invalid_value(self, mock_post):
        self.assertRaises(
            upnp.ValidationError, self.soap.call, "SetFoo", [("NewFoo", "\x00")]
        )
        self.assertEqual(mock_post.call_count, 0)

    def test_envelope_no_args(self):
        tree = etree.fromstring(self.soap.build_envelope("GetFoo"))
        action = tree.find("{%s}Body/{%s}GetFoo" % (SOAP_NS, FOO))
        self.assertEqual(len(action), 0)

    @mock.patch("requests.post", side_effect=EndPrematurelyException)
    def test_call(self, mock_post):
        self.assertRaises(EndPrematurelyException, self.soap.call, "GetFoo")
        args, kwargs = mock_post.call_args
        self.assertEqual(args[0], URL)
        etree.fromstring(kwargs["data"])
        self.assertEqual(kwargs["headers"]["Content-Type"], 'text/xml; charset="utf-8"')
        self.assertEqual(kwargs["headers"]["SOAPAction"], "%s#GetFoo" % FOO)
        self.assertNotIn("Authorization", kwargs["headers"])

    @mock.patch("requests.post")
    def test_call_ok(self, mock_post):
        mock_post.return_value = mock_response(content=TEST_GETFOO_RESPONSE)
        tree = self.soap.call("GetFoo")
        self.assertEqual(tree.findtext(".//NewFoo"), "bar")
        self.assertEqual(mock_post.call_count, 1)

    @mock.patch("requests.post")
    def test_call_connection_error(self, mock_post):
        mock_post.side_effect = requests.exceptions.ConnectionError("refused")
        with self.assertRaises(upnp.TransportError) as ctx:
            self.soap.call("GetFoo")
        self.assertIsInstance(ctx.exception.__cause__, requests.exceptions.ConnectionError)

    @mock.patch("requests.post")
    def test_digest_retry(self, mock_post):
        """
        A 401 with a challenge should be answered once with a digest header.
        """
        first = mock_response(
            401,
            headers={"WWW-Authenticate": 'Digest realm="x", nonce="y", qop=auth'},
            reason="Unauthorized",
        )
        mock_post.side_effect = [first, mock_response(content=TEST_GETFOO_RESPONSE)]
        tree = self.soap.call("GetFoo", username="admin", password="secret")
        self.assertEqual(tree.findtext(".//NewFoo"), "bar")
        self.assertEqual(mock_post.call_count, 2)
        first.close.assert_called_once_with()

        first_kwargs = mock_post.call_args_list[0][1]
        retry_kwargs = mock_post.call_args_list[1][1]
        self.assertNotIn("Authorization", first_kwargs["headers"])
        self.assertEqual(first_kwargs["data"], retry_kwargs["data"])

        scheme, _, params = retry_kwargs["headers"]["Authorization"].partition(" ")
        self.assertEqual(scheme, "Digest")
        d = parse_dict_header(params)
        self.assertEqual(d["uri"], "/upnp/control/foo")
        ha1 = md5("admin:x:secret")
        ha2 = md5("POST:/upnp/control/foo")
        self.assertEqual(
            d["response"], md5("%s:y:00000001:%s:auth:%s" % (ha1, d["cnonce"], ha2))
        )

    @mock.patch("requests.post")
    def test_auth_required(self, mock_post):
        """
        A 401 without configured credentials is not retried.
        """
        mock_post.return_value = mock_response(
            401,
            headers={"WWW-Authenticate": 'Digest realm="x", nonce="y", qop=auth'},
            reason="Unauthorized",
        )
        self.assertRaises(upnp.AuthenticationRequired, self.soap.call, "GetFoo")
        self.assertEqual(mock_post.call_count, 1)

    @mock.patch("requests.post")
    def test_auth_rejected(self, mock_post):
        """
        A second 401 is final.
        """
        mock_post.return_value = mock_response(
            401,
            headers={"WWW-Authenticate": 'Digest realm="x", nonce="y", qop=auth'},
            reason="Unauthorized",
        )
        with self.assertRaises(upnp.TransportError) as ctx:
            self.soap.call("GetFoo", username="admin", password="wrong")
        self.assertEqual(ctx.exception.status_code, 401)
        self.assertEqual(mock_post.call_count, 2)

    @mock.patch("requests.post")
    def test_auth_no_challenge(self, mock_post):
        """
        A 401 without a challenge can't be answered, even with credentials.
        """
        mock_post.return_value = mock_response(401, reason="Unauthorized")
        with self.assertRaises(upnp.TransportError) as ctx:
            self.soap.call("GetFoo", username="admin", password="secret")
        self.assertEqual(ctx.exception.status_code, 401)
        self.assertEqual(mock_post.call_count, 1)
        self.assertNotIn("Authorization", mock_post.call_args[1]["headers"])

    @mock.patch("requests.post")
    def test_unsupported_challenge(self, mock_post):
        mock_post.return_value = mock_response(
            401,
            headers={"WWW-Authenticate": 'Digest realm="x", nonce="y", qop=auth, algorithm=SHA-256'},
            reason="Unauthorized",
        )
        self.assertRaises(
            upnp.UnsupportedDigestScheme,
            self.soap.call, "GetFoo", username="admin", password="secret",
        )
        self.assertEqual(mock_post.call_count, 1)

    @mock.patch("requests.post")
    def test_upnp_error(self, mock_post):
        mock_post.return_value = mock_response(
            500, content=TEST_CALLACTION_UPNPERROR, reason="Internal Server Error"
        )
        with self.assertRaises(upnp.SOAPError) as ctx:
            self.soap.call("GetFoo")
        self.assertIn("401", str(ctx.exception))
        self.assertIn("Action not authorized", str(ctx.exception))
        self.assertEqual(ctx.exception.error_code, 401)
        self.assertEqual(ctx.exception.error_description, "Action not authorized")
        self.assertEqual(ctx.exception.fault_string, "UPnPError")

    @mock.patch("requests.post")
    def test_missing_error_description_element(self, mock_post):
        """
        The standard description of the error code is used when the device
        doesn't send one.
        """
        mock_post.return_value = mock_response(
            500, content=TEST_MISSING_ERROR_DESCRIPTION_ELEMENT, reason="Internal Server Error"
        )
        with self.assertRaises(upnp.SOAPError) as ctx:
            self.soap.call("GetFoo")
        self.assertEqual(ctx.exception.error_code, 402)
        self.assertEqual(
            ctx.exception.error_description, upnp.errors.ERR_CODE_DESCRIPTIONS[402]
        )

    @mock.patch("requests.post")
    def test_non_xml_error(self, mock_post):
        mock_post.return_value = mock_response(
            500, content=b"this is not valid xml", reason="Internal Server Error"
        )
        with self.assertRaises(upnp.SOAPError) as ctx:
            self.soap.call("GetFoo")
        self.assertEqual(str(ctx.exception), "Internal Server Error (500)")
        self.assertIsNone(ctx.exception.error_code)

    @mock.patch("requests.post")
    def test_other_status(self, mock_post):
        mock_post.return_value = mock_response(404, reason="Not Found")
        with self.assertRaises(upnp.TransportError) as ctx:
            self.soap.call("GetFoo")
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertIn("Not Found", str(ctx.exception))

    @mock.patch("requests.post")
    def test_invalid_response(self, mock_post):
        mock_post.return_value = mock_response(content=b"<s:Envelope")
        self.assertRaises(upnp.MalformedDocumentError, self.soap.call, "GetFoo")
