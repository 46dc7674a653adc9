import logging

from lxml import etree


def _getLogger(name):
    """
    Retrieve a logger instance. Checks if a handler is defined so we avoid the
    'No handlers could be found' message.
    """
    logger = logging.getLogger(name)
    # if not logging.root.handlers:
    #     logger.disabled = 1
    return logger


def _localname(node):
    """
    Return the tag name of `node` without its namespace, or None for comments
    and processing instructions.
    """
    if not isinstance(node.tag, str):
        return None
    return etree.QName(node).localname


def _findtext(node, path):
    """
    `findtext` using the namespaces in scope on `node`, stripped and defaulting
    to an empty string.
    """
    return (node.findtext(path, default="", namespaces=node.nsmap) or "").strip()
