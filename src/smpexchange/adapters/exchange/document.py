"""Read and write whole exchange documents."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from smpexchange.domain.exchange import ParsedBatch

from .schema import DocumentEnvelope, ExchangeDocumentModel
from .translator import business_card_element, service_group_element

if TYPE_CHECKING:
    from pathlib import Path

    from smpexchange.domain.exchange import ExportDocument

log = logging.getLogger(__name__)


class DocumentError(ValueError):
    """Raised when a document cannot be read as an exchange document at all."""


def parse_document(payload: object) -> ParsedBatch:
    """Check the document envelope and hand out its raw elements.

    Elements are validated one by one later, so a single malformed service group
    does not reject the whole document.
    """

    try:
        envelope = DocumentEnvelope.model_validate(payload)
    except ValidationError as exc:
        raise DocumentError(f"Not a supported exchange document: {exc}") from exc
    return ParsedBatch(
        service_groups=tuple(envelope.service_groups),
        business_cards=tuple(envelope.business_cards),
    )


def document_to_payload(document: ExportDocument) -> dict[str, Any]:
    model = ExchangeDocumentModel(
        service_groups=[service_group_element(item) for item in document.service_groups],
        business_cards=[business_card_element(card) for card in document.business_cards],
    )
    return model.model_dump(mode="json", exclude_none=True)


def load_document(path: Path) -> ParsedBatch:
    log.info("Reading exchange document %s", path)
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise DocumentError(f"Invalid JSON in {path}: {exc}") from exc
    return parse_document(payload)


def dump_document(document: ExportDocument, path: Path) -> None:
    payload = document_to_payload(document)
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    log.info(
        "Wrote %s service groups and %s business cards to %s",
        len(document.service_groups),
        len(document.business_cards),
        path,
    )
