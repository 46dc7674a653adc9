"""
HTTP Digest authentication (RFC 2617, MD5 with qop=auth) as used by TR-064
devices. The header is computed from the `WWW-Authenticate` challenge of a 401
response and attached to the retried request only.
"""
import hashlib
import os

from requests.utils import parse_dict_header

from .errors import UnsupportedDigestScheme
from .util import _getLogger

NONCE_COUNT = "00000001"

_log = _getLogger("digest")


def _md5(data):
    return hashlib.md5(data.encode("utf-8")).hexdigest()


def parse_challenge(challenge):
    """
    Parse a `WWW-Authenticate: Digest ...` header into a dict of directives.
    """
    scheme, _, params = challenge.strip().partition(" ")
    if scheme.lower() != "digest":
        raise UnsupportedDigestScheme(
            "WWW-Authenticate header is not Digest: %r" % challenge
        )
    return {k.lower(): v for k, v in parse_dict_header(params).items()}


def make_cnonce():
    return os.urandom(8).hex()


def digest_response(ha1, nonce, nc, cnonce, qop, ha2):
    return _md5(":".join((ha1, nonce, nc, cnonce, qop, ha2)))


def digest_authorization(challenge, username, password, uri, method="POST"):
    """
    Compute the value of an `Authorization` header answering `challenge`.

    The nonce count is always 1 and a fresh client nonce is generated on every
    call; no state is kept between calls.
    """
    directives = parse_challenge(challenge)

    algorithm = directives.get("algorithm") or "MD5"
    if algorithm != "MD5":
        raise UnsupportedDigestScheme("Unsupported digest algorithm: %r" % algorithm)
    qop = directives.get("qop")
    if qop != "auth":
        raise UnsupportedDigestScheme("Unsupported digest qop: %r" % qop)

    realm = directives.get("realm") or ""
    nonce = directives.get("nonce") or ""
    ha1 = _md5("%s:%s:%s" % (username, realm, password or ""))
    ha2 = _md5("%s:%s" % (method, uri))
    cnonce = make_cnonce()
    response = digest_response(ha1, nonce, NONCE_COUNT, cnonce, qop, ha2)

    _log.debug("Answering digest challenge for realm %r, uri %r", realm, uri)
    header = (
        'Digest username="%s", realm="%s", nonce="%s", uri="%s", cnonce="%s", '
        'nc=%s, qop=%s, response="%s", algorithm=%s'
        % (username, realm, nonce, uri, cnonce, NONCE_COUNT, qop, response, algorithm)
    )
    if directives.get("opaque"):
        header += ', opaque="%s"' % directives["opaque"]
    return header
