# ============================================================================
# PACKAGE VALIDATOR CONTRACT
# ============================================================================
# STATUS: Infrastructure - pluggable package-format boundary
# PURPOSE: Recognize uploaded files as packages and describe them
# EXPORTS: IPackageValidator, load_package_validator
# DEPENDENCIES: importlib
# ============================================================================

"""
Package Validator Contract.

Package-format semantics live outside this service. A deployment supplies an
IPackageValidator implementation and names it in PACKAGE_VALIDATOR as
"module.path:ClassName"; load_package_validator() imports and instantiates
it once at startup.

Example:
    PACKAGE_VALIDATOR=msi_tools.validator:MsiPackageValidator
"""

import importlib
from abc import ABC, abstractmethod
from typing import Optional

from core.models.catalog import CanonicalName, CatalogEntry
from core.models.package import PackageIdentity, PackageMetadata
from exceptions import ConfigurationError
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.VALIDATOR, "PackageValidator")


class IPackageValidator(ABC):
    """
    Package recognition and lookup.

    All methods are blocking and are called from executor threads.
    """

    @abstractmethod
    def query_package(self, path: str) -> Optional[PackageIdentity]:
        """
        Inspect a local file.

        Returns:
            PackageIdentity, or None if the file is not a package

        Raises:
            PackageValidationError: The validator faulted
            PackageValidationCancelled: The query was cancelled
        """
        pass

    @abstractmethod
    def get_package_details(self, identity: PackageIdentity) -> PackageMetadata:
        """Fetch full details for a recognized package."""
        pass

    @abstractmethod
    def get_catalog_entry(self, canonical_name: CanonicalName) -> Optional[CatalogEntry]:
        """Build the catalog entry describing a recognized package, if known."""
        pass


def load_package_validator(import_path: Optional[str]) -> IPackageValidator:
    """
    Import and instantiate the configured validator.

    Args:
        import_path: "module.path:ClassName"

    Raises:
        ConfigurationError: Unset, not importable, or not an IPackageValidator
    """
    if not import_path:
        raise ConfigurationError("PACKAGE_VALIDATOR is not set (expected 'module:ClassName')")

    module_name, sep, class_name = import_path.partition(":")
    if not sep or not module_name or not class_name:
        raise ConfigurationError(
            f"PACKAGE_VALIDATOR '{import_path}' must have the form 'module:ClassName'"
        )

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import package validator module '{module_name}': {e}") from e

    validator_class = getattr(module, class_name, None)
    if validator_class is None:
        raise ConfigurationError(f"Module '{module_name}' has no attribute '{class_name}'")
    if not (isinstance(validator_class, type) and issubclass(validator_class, IPackageValidator)):
        raise ConfigurationError(f"'{import_path}' is not an IPackageValidator subclass")

    validator = validator_class()
    logger.info(f"Loaded package validator: {import_path}")
    return validator
