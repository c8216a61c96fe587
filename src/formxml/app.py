"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from formxml.adapters.fedora import FedoraClient
from formxml.adapters.form_definition import (
    load_form_definition,
    load_submission,
    translate_form,
)
from formxml.config import get_repository_config
from formxml.domain.document import XMLDocument
from formxml.domain.form import XMLFormProcessor, apply_submission, build_form
from formxml.testing import RepositoryTestHarness

if TYPE_CHECKING:
    from pathlib import Path

    from formxml.config import RepositoryConfig
    from formxml.domain.form import ProcessReport
    from formxml.domain.ports.repository import RepositoryClient

log = getLogger(__name__)


def apply_form_submission(
    *,
    definition_path: Path,
    submission_path: Path,
    document_path: Path | None = None,
    output_path: Path | None = None,
) -> ProcessReport:
    """Reconcile a submission against a document and write the result.

    Without ``document_path`` the form starts from an empty document rooted at
    the definition's ``root``. The result goes to ``output_path``, falling back
    to ``document_path``.
    """

    definition = load_form_definition(definition_path)
    submitted = load_submission(submission_path)

    if document_path is not None and document_path.exists():
        document = XMLDocument.from_path(document_path, namespaces=definition.namespaces)
    else:
        document = XMLDocument.empty(definition.root, namespaces=definition.namespaces)

    log.info(
        "Applying submission %s to %s using form %s",
        submission_path,
        document_path or "<new document>",
        definition.name,
    )

    build = build_form(translate_form(definition), document)
    values = apply_submission(build, submitted)
    processor = XMLFormProcessor(values, document, build.elements)
    processor.process(build.root)
    report = processor.report

    target = output_path or document_path
    if target is not None:
        document.write(target)
        log.info("Wrote %s", target)

    log.info(
        "Finished form %s: created=%s, updated=%s, deleted=%s, orphans=%s, dropped=%s",
        definition.name,
        report.created,
        report.updated,
        report.deleted,
        report.orphans_deleted,
        len(report.dropped),
    )
    return report


def purge_owner_objects(
    owner: str,
    *,
    client: RepositoryClient | None = None,
    config: RepositoryConfig | None = None,
) -> RepositoryTestHarness:
    """Purge every repository object owned by ``owner`` and return the harness."""

    effective_config = config or get_repository_config()
    effective_client = client or FedoraClient(config=effective_config)
    harness = RepositoryTestHarness(effective_client, config=effective_config)

    log.info("Purging objects owned by %s", owner)
    harness.delete_user_objects(owner)
    for failure in harness.failures:
        log.warning("%s", failure.message)
    return harness
