from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, File, HTTPException, Response, UploadFile, status
from fastapi.concurrency import run_in_threadpool

from agentgift.api.deps import get_current_user
from agentgift.core.config import settings
from agentgift.modules.llm import ProviderNotConfigured
from agentgift.modules.notifications.webhooks import MakeWebhookClient, get_make_client
from agentgift.modules.users.models import User
from .clients import ElevenLabsClient, VoiceUpstreamError, WhisperTranscriber, get_tts_client, get_transcriber
from .schemas import SpeechRequest, TranscriptionResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/voice", tags=["voice"])

UserDep = Annotated[User, Depends(get_current_user)]


@router.post("/tts", response_class=Response)
def text_to_speech(
    payload: SpeechRequest,
    background_tasks: BackgroundTasks,
    current: UserDep,
    client: Annotated[ElevenLabsClient, Depends(get_tts_client)],
    make: Annotated[MakeWebhookClient, Depends(get_make_client)],
):
    if not client.configured:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="ElevenLabs API key not configured")
    voice_id = payload.voice_id or settings.ELEVENLABS_DEFAULT_VOICE_ID
    if not payload.text or not voice_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Text and voice_id are required")
    try:
        audio = client.synthesize(payload.text, voice_id)
    except VoiceUpstreamError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    background_tasks.add_task(make.trigger, "tts", {"voiceId": voice_id, "characters": len(payload.text)}, current.id)
    return Response(content=audio, media_type="audio/mpeg")


@router.post("/transcribe", response_model=TranscriptionResponse)
async def transcribe(
    _: UserDep,
    transcriber: Annotated[WhisperTranscriber, Depends(get_transcriber)],
    audio: Annotated[UploadFile | None, File()] = None,
):
    if not transcriber.configured:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Whisper API key not configured")
    if audio is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Audio file is required")
    content = await audio.read()
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Audio file is required")
    try:
        text = await run_in_threadpool(transcriber.transcribe, audio.filename or "audio.webm", content)
    except ProviderNotConfigured as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    except VoiceUpstreamError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return TranscriptionResponse(text=text)
