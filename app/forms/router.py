from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_session
from app.core.llm.deps import get_openai_client
from app.core.settings import get_settings
from app.forms.deps import get_artifact_storage
from app.forms.schemas import FormFillBatchIn, FormFillBatchOut
from app.forms.service import FormFillService
from app.forms.storage import ArtifactStorage, resolve_public_file

router = APIRouter(prefix="/form-fills", tags=["form-fills"])
public_router = APIRouter(prefix="/public/files", tags=["public-files"])
logger = logging.getLogger("app.form_fill")


@router.post(
    "",
    response_model=FormFillBatchOut,
    summary="Fill benefit forms",
    description=(
        "For each request, in order: load the benefit document, ask the LLM to fill it with "
        "the contact's details, store the result as a text file and create a public link.\n\n"
        "The first failing request aborts the batch; no partial result is returned and files "
        "already published are kept."
    ),
)
async def fill_forms_route(
    payload: FormFillBatchIn,
    request: Request,
    session: AsyncSession = Depends(get_session),
    storage: ArtifactStorage = Depends(get_artifact_storage),
    openai_client=Depends(get_openai_client),
) -> FormFillBatchOut:
    if openai_client is None:
        request_id = getattr(request.state, "request_id", None)
        logger.info(
            "Form fill failed (LLM not configured)",
            extra={
                "request_id": request_id,
                "batch_size": len(payload.requests),
                "success": False,
            },
        )
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail="LLM service unavailable"
        )

    svc = FormFillService(session=session, llm_client=openai_client, storage=storage)
    # Domain errors propagate to the handlers registered in app.api.exception_handlers.
    urls = await svc.fill_forms(requests=payload.requests)
    return FormFillBatchOut(urls=urls)


@public_router.get(
    "/{public_token}",
    response_class=FileResponse,
    summary="Download a filled form",
    description="Unauthenticated download of a generated form via its public link.",
)
async def download_public_file(
    public_token: str,
    session: AsyncSession = Depends(get_session),
) -> FileResponse:
    settings = get_settings()
    public_file = await resolve_public_file(
        session=session,
        base_dir=Path(settings.artifact_storage_base_path),
        public_token=public_token,
    )
    if public_file is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")

    return FileResponse(
        path=public_file.path,
        media_type="text/plain; charset=utf-8",
        filename=public_file.file_name,
        content_disposition_type="inline" if public_file.inline else "attachment",
    )
