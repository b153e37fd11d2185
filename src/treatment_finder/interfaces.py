"""Abstract interfaces for the collaborators around the quiz engine.

These ABCs define the contract that external implementations must fulfil:

  - ``Catalog``: read-only source of questions and treatments.  The scoring
    engine and the flow controller depend on this interface only, so they can
    be exercised against synthetic catalogs.  ``CatalogStore`` is the YAML
    backed implementation shipped with the SDK.
  - ``LeadSink``: receives the contact details and quiz outcome captured on
    the results page.  Delivering a lead (email, CRM, ...) is out of scope
    for the SDK, which ships no concrete sink.

Typical integration flow::

    store = CatalogStore()
    store.load()
    flow = QuizFlow(store)

    session = flow.start()
    session = flow.select(session, "goal", "energy")
    # ... one call per visitor interaction ...

    step = flow.current_step(session)          # ResultsStep once complete
    snapshot = flow.snapshot(session)

    sink: LeadSink = MyCrmLeadSink(...)
    await sink.submit(Lead(name=..., email=..., snapshot=snapshot,
                           recommendations=step.recommendations,
                           source=LEAD_SOURCE))
"""

from abc import ABC, abstractmethod

from treatment_finder.models.catalog import Question, Treatment
from treatment_finder.models.session import Lead


class Catalog(ABC):
    """Interface for the static question/treatment catalog."""

    @abstractmethod
    def get_questions(self) -> list[Question]:
        """Return all questions in presentation order.

        The order must be stable for a given catalog version; the session
        cursor indexes into this list.
        """
        ...

    @abstractmethod
    def get_treatments(self) -> list[Treatment]:
        """Return all treatments in declaration order.

        Declaration order breaks ties between equally scored treatments.
        """
        ...


class LeadSink(ABC):
    """Interface for the lead-capture collaborator.

    Implementations receive a fully built :class:`Lead`; the SDK never
    interprets the snapshot it carries.
    """

    @abstractmethod
    async def submit(self, lead: Lead) -> None:
        """Deliver a lead.

        Parameters
        ----------
        lead:
            Contact details plus the completed session snapshot and the
            recommendations that were shown.

        Raises
        ------
        Exception
            Any delivery failure propagates to the caller, which decides
            whether the results page is still shown.
        """
        ...
