"""Reconcile a submitted form against its XML document.

One ``process`` call is a reconciliation pass:

1) flatten the element tree and drop elements the user cannot access
2) select at most one action per element, phase by phase (create, update, delete);
   elements the submission left untouched are never selected for delete
3) run creates until a full pass over the queue makes no progress
4) run updates, then explicit deletes, once each in tree order
5) run the delete action of every registered element that is no longer visible

Creates that never become executable are dropped without raising; they are
logged and listed on ``ProcessReport.dropped``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from .actions import ActionPhase

if TYPE_CHECKING:
    from formxml.domain.document import XMLDocument

    from .actions import Action
    from .element import ElementRegistry, FormElement
    from .values import FormValues

log = getLogger(__name__)

_SELECTION_ORDER = (ActionPhase.CREATE, ActionPhase.UPDATE, ActionPhase.DELETE)


@dataclass(slots=True, frozen=True)
class ProcessAction:
    """An action bound to the element and value it runs for."""

    action: Action
    element: FormElement
    value: object

    def execute(self, document: XMLDocument) -> bool:
        return self.action.execute(document, self.element, self.value)


@dataclass(slots=True)
class ProcessReport:
    """What one reconciliation pass did to the document."""

    created: int = 0
    create_passes: int = 0
    updated: int = 0
    deleted: int = 0
    orphans_deleted: int = 0
    dropped: list[ProcessAction] = field(default_factory=list["ProcessAction"])

    @property
    def mutations(self) -> int:
        return self.created + self.updated + self.deleted + self.orphans_deleted

    @property
    def complete(self) -> bool:
        return not self.dropped


class XMLFormProcessor:
    """Apply a form submission to an XML document.

    ``element_registry`` must know every element ever built for the form,
    including instances the user has since removed, so their nodes can be
    deleted.
    """

    def __init__(
        self,
        values: FormValues,
        document: XMLDocument,
        element_registry: ElementRegistry,
    ) -> None:
        self.values = values
        self.document = document
        self.element_registry = element_registry
        self.report = ProcessReport()

    def process(self, root: FormElement) -> XMLDocument:
        self.report = ProcessReport()
        elements = self._filter_elements(root.flatten())
        visible = {element.hash for element in elements}

        queues = self._select_actions(elements)
        self._create(queues[ActionPhase.CREATE])
        self._update(queues[ActionPhase.UPDATE])
        self._delete(queues[ActionPhase.DELETE])
        self._delete_orphans(visible)

        log.debug(
            "Processed form %s: created=%s (passes=%s), updated=%s, deleted=%s, orphans=%s",
            root.hash,
            self.report.created,
            self.report.create_passes,
            self.report.updated,
            self.report.deleted,
            self.report.orphans_deleted,
        )
        return self.document

    def _filter_elements(self, elements: list[FormElement]) -> list[FormElement]:
        return [element for element in elements if element.is_accessible]

    def _select_actions(
        self, elements: list[FormElement]
    ) -> dict[ActionPhase, list[ProcessAction]]:
        remaining = list(elements)
        queues: dict[ActionPhase, list[ProcessAction]] = {}
        for phase in _SELECTION_ORDER:
            queue: list[ProcessAction] = []
            unselected: list[FormElement] = []
            for element in remaining:
                action = self._action_for(element, phase)
                value = self.values.get(element)
                if action is not None and action.should_execute(self.document, element, value):
                    queue.append(ProcessAction(action, element, value))
                else:
                    unselected.append(element)
            queues[phase] = queue
            remaining = unselected
        return queues

    def _action_for(self, element: FormElement, phase: ActionPhase) -> Action | None:
        if phase is ActionPhase.DELETE and self.values.is_untouched(element):
            return None
        return element.actions.for_phase(phase)

    def _create(self, pending: list[ProcessAction]) -> None:
        while pending:
            self.report.create_passes += 1
            still_pending = [action for action in pending if not action.execute(self.document)]
            executed = len(pending) - len(still_pending)
            self.report.created += executed
            pending = still_pending
            if executed == 0:
                break

        if pending:
            self.report.dropped.extend(pending)
            log.warning(
                "Dropped %s create action(s) that never became executable: %s",
                len(pending),
                ", ".join(action.element.hash for action in pending),
            )

    def _update(self, pending: list[ProcessAction]) -> None:
        for action in pending:
            if action.execute(self.document):
                self.report.updated += 1

    def _delete(self, pending: list[ProcessAction]) -> None:
        for action in pending:
            if action.execute(self.document):
                self.report.deleted += 1

    def _delete_orphans(self, visible: set[str]) -> None:
        for action in self._orphan_actions(visible):
            if action.execute(self.document):
                self.report.orphans_deleted += 1

    def _orphan_actions(self, visible: set[str]) -> list[ProcessAction]:
        actions: list[ProcessAction] = []
        for element_hash in self.document.registry.hashes():
            if element_hash in visible:
                continue
            element = self.element_registry.get(element_hash)
            if element is None or element.actions.delete is None:
                continue
            actions.append(ProcessAction(element.actions.delete, element, None))
        return actions
