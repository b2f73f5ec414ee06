"""
Domain Validation Utilities

This module provides domain validation and normalization functions, plus
the check for required modules, for the Wayback URL extractor.
"""

import importlib.util
import re
from typing import Dict, Optional, Tuple
import logging

from ..core.errors import DomainValidationError, MissingDependencyError

# Module name -> install hint
REQUIRED_MODULES: Dict[str, str] = {
    'requests': 'pip install requests',
}


class DomainValidator:
    """
    Validates and normalizes target domains.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

        # One or more labels followed by an alphabetic TLD of 2+ chars
        self.domain_pattern = re.compile(
            r'^([a-zA-Z0-9]([a-zA-Z0-9\-]{0,61}[a-zA-Z0-9])?\.)+[a-zA-Z]{2,}$'
        )
        self.scheme_pattern = re.compile(r'^https?://')

    def strip_scheme(self, target: str) -> str:
        """Remove a leading http:// or https:// prefix."""
        return self.scheme_pattern.sub('', target, count=1)

    def validate(self, domain: str) -> Tuple[bool, str]:
        """
        Check a bare domain against the accepted syntax.

        Args:
            domain: Domain with the scheme already stripped

        Returns:
            Tuple of (is_valid, error_message)
        """
        if not domain or not isinstance(domain, str):
            return False, "Domain cannot be empty"

        if not self.domain_pattern.match(domain):
            return False, "Invalid domain format"

        return True, ""

    def normalize(self, target: str) -> str:
        """
        Strip the scheme from a user-supplied target and validate it.

        Args:
            target: Domain, optionally prefixed with http:// or https://

        Returns:
            The bare domain

        Raises:
            DomainValidationError: If the domain fails the syntax check
        """
        domain = self.strip_scheme(target or '')
        is_valid, error = self.validate(domain)
        if not is_valid:
            self.logger.debug(f"Rejected domain {domain!r}: {error}")
            raise DomainValidationError(f"{error}: {domain!r}. Please provide a valid domain (e.g., example.com)")
        return domain


_validator_instance: Optional[DomainValidator] = None


def get_validator() -> DomainValidator:
    """
    Get the global domain validator instance.

    Returns:
        DomainValidator instance
    """
    global _validator_instance
    if _validator_instance is None:
        _validator_instance = DomainValidator()
    return _validator_instance


def validate_domain(domain: str) -> Tuple[bool, str]:
    """
    Convenience wrapper returning (is_valid, error_message).
    """
    return get_validator().validate(domain)


def normalize_domain(target: str) -> str:
    """Strip the scheme and validate; raises DomainValidationError."""
    return get_validator().normalize(target)


def check_dependencies(modules: Dict[str, str] = None):
    """
    Make sure every required module can be imported.

    Args:
        modules: Mapping of module name to install hint

    Raises:
        MissingDependencyError: For the first module that is missing
    """
    logger = logging.getLogger(__name__)
    logger.info("Checking dependencies...")
    for module, hint in (modules or REQUIRED_MODULES).items():
        if importlib.util.find_spec(module) is None:
            raise MissingDependencyError(module, hint)
    logger.info("All dependencies satisfied")
