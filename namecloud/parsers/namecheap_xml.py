"""
Parser for Namecheap XML API responses.

Every Namecheap command answers with an ``ApiResponse`` envelope carrying a
``Status`` attribute, an ``Errors`` list and a ``CommandResponse`` element
whose content depends on the command.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from lxml import etree

from ..core.models import DomainInfo, DomainListing, Whoisguard
from ..exceptions import RegistrarError

logger = logging.getLogger(__name__)

NAMECHEAP_DATE_FORMAT = "%m/%d/%Y"

_parser = etree.XMLParser(
    resolve_entities=False,
    no_network=True,
    remove_blank_text=True,
)


def _qualify(root: etree._Element, tag: str) -> str:
    """Qualify a tag with the document's default namespace, if it has one."""
    ns = root.nsmap.get(None)
    return f"{{{ns}}}{tag}" if ns else tag


def _find(elem: etree._Element, *tags: str) -> Optional[etree._Element]:
    for tag in tags:
        if elem is None:
            return None
        elem = elem.find(_qualify(elem, tag))
    return elem


def _text(elem: Optional[etree._Element], default: str = "") -> str:
    if elem is None or elem.text is None:
        return default
    return elem.text.strip()


def parse_bool(value: Optional[str]) -> bool:
    return (value or "").strip().lower() == "true"


def parse_date(value: str) -> Optional[datetime]:
    """Parse a Namecheap ``MM/DD/YYYY`` date as midnight UTC."""
    if not value:
        return None
    try:
        return datetime.strptime(value.strip(), NAMECHEAP_DATE_FORMAT).replace(
            tzinfo=timezone.utc
        )
    except ValueError:
        logger.warning(f"Unparseable Namecheap date: {value}")
        return None


def parse_api_response(xml_data: bytes) -> etree._Element:
    """
    Parse the response envelope and return its ``CommandResponse`` element.

    Raises:
        RegistrarError: if the document is not XML, or the API reported
            ``Status="ERROR"``.
    """
    try:
        root = etree.fromstring(xml_data, _parser)
    except etree.XMLSyntaxError as e:
        raise RegistrarError(f"Malformed Namecheap response: {e}") from e

    status = root.get("Status", "")
    if status.upper() != "OK":
        errors = _find(root, "Errors")
        codes = []
        messages = []
        if errors is not None:
            for err in errors.findall(_qualify(root, "Error")):
                codes.append(err.get("Number", ""))
                messages.append(_text(err))
        detail = "; ".join(messages) or "no error details"
        raise RegistrarError(
            f"Namecheap API returned Status={status or 'missing'}: {detail}",
            codes=codes,
        )

    command_response = _find(root, "CommandResponse")
    if command_response is None:
        raise RegistrarError("Namecheap response has no CommandResponse")
    return command_response


def parse_result_flag(command_response: etree._Element, result_tag: str, attr: str) -> bool:
    """Read a boolean attribute such as ``IsSuccess`` off a command result."""
    result = _find(command_response, result_tag)
    if result is None:
        raise RegistrarError(f"Namecheap response has no {result_tag}")
    return parse_bool(result.get(attr))


def parse_domain_list(command_response: etree._Element) -> Tuple[List[DomainListing], int]:
    """
    Parse a ``namecheap.domains.getList`` response.

    Returns:
        The domains on this page, and the total number of domains across
        all pages.
    """
    domains = []
    result = _find(command_response, "DomainGetListResult")
    if result is not None:
        for elem in result.findall(_qualify(result, "Domain")):
            domains.append(
                DomainListing(
                    name=elem.get("Name", ""),
                    is_expired=parse_bool(elem.get("IsExpired")),
                    is_locked=parse_bool(elem.get("IsLocked")),
                )
            )

    total_text = _text(_find(command_response, "Paging", "TotalItems"))
    total = int(total_text) if total_text.isdigit() else len(domains)
    return domains, total


def parse_domain_info(command_response: etree._Element) -> DomainInfo:
    """Parse a ``namecheap.domains.getInfo`` response."""
    result = _find(command_response, "DomainGetInfoResult")
    if result is None:
        raise RegistrarError("Namecheap response has no DomainGetInfoResult")

    guard_elem = _find(result, "Whoisguard")
    whoisguard = Whoisguard()
    if guard_elem is not None:
        email = _find(guard_elem, "EmailDetails")
        whoisguard = Whoisguard(
            id=_text(_find(guard_elem, "ID")),
            enabled=parse_bool(guard_elem.get("Enabled")),
            forwarded_to=email.get("ForwardedTo", "") if email is not None else "",
        )

    nameservers = []
    dns_details = _find(result, "DnsDetails")
    if dns_details is not None:
        nameservers = [
            _text(ns)
            for ns in dns_details.findall(_qualify(dns_details, "Nameserver"))
            if _text(ns)
        ]

    status = result.get("Status", "")
    is_expired = parse_bool(result.get("IsExpired")) or status.lower() == "expired"

    return DomainInfo(
        name=result.get("DomainName", ""),
        created=parse_date(_text(_find(result, "DomainDetails", "CreatedDate"))),
        is_expired=is_expired,
        is_locked=parse_bool(result.get("IsLocked")) or status.lower() == "locked",
        whoisguard=whoisguard,
        nameservers=nameservers,
    )
