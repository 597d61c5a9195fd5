from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.metrics import form_fills_total, llm_request_duration_seconds
from app.forms.prompt import build_form_fill_prompt
from app.forms.publisher import publish_artifact
from app.forms.records import get_benefit_document, get_contact_details
from app.forms.schemas import FormFillRequest
from app.forms.storage import ArtifactStorage

logger = logging.getLogger("app.form_fill")


class LLMClient(Protocol):
    async def complete(self, *, prompt: str) -> str: ...


def artifact_title(*, benefit_id: str) -> str:
    return f"Filled Benefit Form - {benefit_id}"


class FormFillService:
    """
    Fill benefit forms one request at a time.

    Steps per request: fetch benefit -> fetch contact -> build prompt -> LLM completion
    -> publish. Every step is awaited before the next starts; nothing is retried.
    """

    def __init__(self, *, session: AsyncSession, llm_client: LLMClient, storage: ArtifactStorage):
        self._session = session
        self._llm = llm_client
        self._storage = storage

    async def fill_form(self, *, request: FormFillRequest) -> str:
        benefit = await get_benefit_document(session=self._session, benefit_id=request.benefit_id)
        contact = await get_contact_details(session=self._session, contact_id=request.contact_id)

        prompt = build_form_fill_prompt(document_text=benefit.raw_text, contact=contact)

        started = time.perf_counter()
        try:
            generated_text = await self._llm.complete(prompt=prompt)
        finally:
            llm_request_duration_seconds.observe(time.perf_counter() - started)

        link = await publish_artifact(
            storage=self._storage,
            title=artifact_title(benefit_id=benefit.id),
            content=generated_text.encode("utf-8"),
        )
        return link.url

    async def fill_forms(self, *, requests: Sequence[FormFillRequest]) -> list[str]:
        """
        Process `requests` in order and return one public URL per request.

        The first failure aborts the batch: later requests are not attempted and no
        partial result is returned. Artifacts already published stay in place.
        """

        urls: list[str] = []
        for position, request in enumerate(requests):
            try:
                url = await self.fill_form(request=request)
            except Exception as exc:  # noqa: BLE001
                form_fills_total.labels(outcome="failed").inc()
                logger.info(
                    "Form fill failed; aborting batch",
                    extra={
                        "benefit_id": request.benefit_id,
                        "contact_id": request.contact_id,
                        "error": exc.__class__.__name__,
                        "batch_size": len(requests),
                        "success": False,
                    },
                )
                if position + 1 < len(requests):
                    form_fills_total.labels(outcome="skipped").inc(len(requests) - position - 1)
                raise

            form_fills_total.labels(outcome="succeeded").inc()
            logger.info(
                "Form filled",
                extra={
                    "benefit_id": request.benefit_id,
                    "contact_id": request.contact_id,
                    "batch_size": len(requests),
                    "success": True,
                },
            )
            urls.append(url)
        return urls
