"""Default lead sink for the server.

Delivering leads to email or a CRM is not part of this project; the server
logs each lead instead so a deployment can swap in its own
:class:`~treatment_finder.interfaces.LeadSink` via ``create_app(lead_sink=...)``.
"""

import logging

from treatment_finder.interfaces import LeadSink
from treatment_finder.models.session import Lead

logger = logging.getLogger(__name__)


def _mask_email(email: str) -> str:
    local, _, domain = email.partition("@")
    if not domain:
        return "***"
    return f"{local[:1]}***@{domain}"


class LoggingLeadSink(LeadSink):
    """Logs each lead at INFO level and keeps nothing."""

    async def submit(self, lead: Lead) -> None:
        logger.info(
            "Quiz lead from %s (source=%s, answered=%d, recommended=%s)",
            _mask_email(lead.email),
            lead.source,
            len(lead.snapshot.answers_given),
            ", ".join(r.treatment_id for r in lead.recommendations),
        )
