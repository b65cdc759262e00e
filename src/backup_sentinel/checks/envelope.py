#!/usr/bin/env python3
"""
Encryption-envelope validation.

Encrypted backups are written as a JSON document:

    {"encrypted": true, "version": "1.0",
     "encryptedData": "...", "salt": "...", "iv": "...", "tag": "..."}

Anything that does not parse as JSON (a raw SQLite file, a SQL dump) is simply
not an envelope. A document that claims to be a version 1.0 envelope but lacks
one of the payload fields is a corrupt envelope.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from ..base_check import ArtifactCheck
from ..errors import ComplianceViolation, IntegrityError
from ..models import CheckCategory, CheckItem, CheckStatus, EnvelopeDetails, Severity
from ..store import ArtifactStore

logger = logging.getLogger(__name__)

ENVELOPE_VERSION = "1.0"
REQUIRED_FIELDS = ("encryptedData", "salt", "iv", "tag")
SNIFF_SIZE = 4096


@dataclass(frozen=True)
class EnvelopeInspection:
    """Structural reading of a parsed backup document."""
    marked_encrypted: bool
    version: Optional[str]
    missing_fields: Tuple[str, ...]

    @property
    def claims_encryption(self) -> bool:
        return self.marked_encrypted and self.version == ENVELOPE_VERSION

    @property
    def is_valid(self) -> bool:
        return self.claims_encryption and not self.missing_fields


def load_document(store: ArtifactStore, path: str) -> Optional[Any]:
    """
    Parse an artifact as UTF-8 JSON.

    Returns None when the content is not JSON. Only files whose first
    non-whitespace byte opens a JSON object are read in full.

    Raises:
        OSError: If the artifact cannot be read
    """
    head = store.read_head(path, SNIFF_SIZE).lstrip()
    if head and not head.startswith(b"{"):
        return None

    data = store.read_bytes(path)
    try:
        return json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        return None


def inspect_envelope(document: Any) -> EnvelopeInspection:
    """Read the envelope markers and payload fields from a parsed document."""
    if not isinstance(document, dict):
        return EnvelopeInspection(marked_encrypted=False, version=None, missing_fields=())

    version = document.get("version")
    missing = tuple(
        name for name in REQUIRED_FIELDS
        if document.get(name) is None or document.get(name) == ""
    )
    return EnvelopeInspection(
        marked_encrypted=bool(document.get("encrypted")),
        version=version if isinstance(version, str) else None,
        missing_fields=missing,
    )


def is_marked_encrypted(store: ArtifactStore, path: str) -> bool:
    """
    Best-effort read used for coverage sampling.

    Read or parse problems count as "not encrypted" rather than failing the
    sample.
    """
    try:
        document = load_document(store, path)
    except Exception as e:
        logger.debug(f"Encryption sampling could not read {path}: {e}")
        return False
    return inspect_envelope(document).marked_encrypted


class EnvelopeValidation(ArtifactCheck):
    """Checks whether an artifact is a well-formed encrypted envelope."""

    name_prefix = "encryption"
    category = CheckCategory.SECURITY
    failure_severity = Severity.MEDIUM

    def failure_message(self) -> str:
        return "Cannot verify encryption status"

    async def run_check(self) -> CheckItem:
        document = await self.run_blocking(load_document, self.store, self.artifact.path)
        inspection = inspect_envelope(document)
        details = EnvelopeDetails(
            claims_encryption=inspection.claims_encryption,
            version=inspection.version,
            missing_fields=inspection.missing_fields,
        )

        if not inspection.claims_encryption:
            raise ComplianceViolation("Backup is not encrypted", details)

        if inspection.missing_fields:
            logger.warning(
                f"Encrypted backup {self.artifact.name} is missing envelope fields: "
                f"{', '.join(inspection.missing_fields)}"
            )
            raise IntegrityError("Encrypted backup has invalid structure", details)

        return self.make_item(CheckStatus.PASS, Severity.LOW, "Backup is properly encrypted", details)
