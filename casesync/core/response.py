"""Extraction of external handles from a create response body.

Lookups match on local tag names only, so any namespace prefix (or a
change of namespace URI) on any element is tolerated.
"""

import logging
import xml.etree.ElementTree as ET

from .models import ExternalHandles

logger = logging.getLogger(__name__)

PERSON_PATH = ("PersonResponse", "personHandle")
POSITION_PATH = ("PositionResponse", "positionHandle")
CASE_PATH = ("CaseResponse", "caseHandle")


def _local_name(tag: str) -> str:
    """Strip a "{namespace-uri}" qualifier from an element tag."""
    return tag.rsplit("}", 1)[-1]


def find_child_text(root: ET.Element, parent: str, child: str) -> str:
    """Text of the first <parent>/<child> element anywhere under root.

    Returns the trimmed text, or "" if no such element exists.
    """
    for element in root.iter():
        if not isinstance(element.tag, str) or _local_name(element.tag) != parent:
            continue
        for candidate in element:
            if isinstance(candidate.tag, str) and _local_name(candidate.tag) == child:
                return (candidate.text or "").strip()
    return ""


def parse_handles(body: str) -> ExternalHandles:
    """Parse the three handles out of an XML response body.

    A body that is not well-formed XML yields empty handles; the caller
    reports it as an incomplete response along with the raw body.
    """
    try:
        # An XML declaration is only legal at the very start of the document
        root = ET.fromstring(body.lstrip())
    except ET.ParseError as e:
        logger.warning(f"Response body is not well-formed XML: {e}")
        return ExternalHandles()

    return ExternalHandles(
        person_handle=find_child_text(root, *PERSON_PATH),
        position_handle=find_child_text(root, *POSITION_PATH),
        case_handle=find_child_text(root, *CASE_PATH),
    )
