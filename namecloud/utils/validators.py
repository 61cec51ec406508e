"""
Validators - Input validation for domain names

This module validates and normalizes the domain names handed to the
registrar and zone-provider APIs, and splits registrable domains into
label and public suffix.
"""

import logging
import re

import dns.exception
import dns.name
import tldextract

from ..core.models import ParsedDomain
from ..exceptions import DomainParseError

logger = logging.getLogger(__name__)

# Bundled public suffix snapshot only, nothing fetched or cached on disk.
_extract = tldextract.TLDExtract(suffix_list_urls=(), cache_dir=None)

_LABEL_RE = re.compile(r"^[a-z0-9]([a-z0-9-]*[a-z0-9])?$")


def validate_domain_name(name: str) -> bool:
    """
    Validate a registrable domain name.

    Args:
        name: The domain name to validate, without trailing dot

    Returns:
        True if valid, False otherwise
    """
    if not name or not isinstance(name, str):
        return False

    if name.endswith("."):
        logger.warning(f"Domain name ends with dot: {name}")
        return False

    if len(name) > 253:
        logger.warning(f"Domain name too long: {name}")
        return False

    labels = name.lower().split(".")
    if len(labels) < 2:
        logger.warning(f"Domain name must have at least 2 labels: {name}")
        return False

    for label in labels:
        if len(label) == 0 or len(label) > 63 or not _LABEL_RE.match(label):
            logger.warning(f"Invalid label '{label}' in domain name: {name}")
            return False

    return True


def sanitize_domain_name(name: str) -> str:
    """
    Normalize a domain name to lowercase ASCII without a trailing dot.

    Internationalized names are converted to their IDNA (punycode) form,
    which is what both APIs expect.
    """
    if not name:
        return name

    try:
        parsed = dns.name.from_text(name.strip())
    except dns.exception.DNSException as e:
        raise DomainParseError(f"Invalid domain name '{name}': {e}") from e

    return parsed.to_text(omit_final_dot=True).lower()


def split_domain(name: str) -> ParsedDomain:
    """
    Split a domain into its registrable label and public suffix.

    ``example.co.uk`` becomes ``ParsedDomain(sld="example", tld="co.uk")``.

    Raises:
        DomainParseError: if the name has no public suffix or no label in
            front of it.
    """
    extracted = _extract(name)
    if not extracted.suffix:
        raise DomainParseError(f"'{name}' has no known public suffix")
    if not extracted.domain:
        raise DomainParseError(f"'{name}' is a public suffix, not a registrable domain")

    return ParsedDomain(sld=extracted.domain, tld=extracted.suffix)
