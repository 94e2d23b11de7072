import logging
import math
import threading
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from babble.services.brain import ChainBrain
from babble.services.frontend import BrainFrontend
from babble.services.markov_tools import foul_play
from babble.services.rarity import Sentence

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/markov", tags=["markov"])

_frontends_lock = threading.Lock()


class LearnRequest(BaseModel):
    text: str
    source: Optional[str] = None


class ForgetRequest(BaseModel):
    text: str


class RespondRequest(BaseModel):
    text: str
    source: Optional[str] = None


class WordCountRequest(BaseModel):
    words: List[str]


class SeedsRequest(BaseModel):
    text: str
    count: int = 2


def _rarity_value(rarity: float) -> float | str:
    # JSON has no infinities.
    return rarity if math.isfinite(rarity) else str(rarity)


def _sentence_payload(sentence: Sentence) -> dict:
    return {"text": sentence.content, "rarity": _rarity_value(sentence.rarity)}


def _brain(request: Request) -> ChainBrain:
    brain = getattr(request.app.state, "brain", None)
    if brain is None:
        raise HTTPException(status_code=503, detail="brain not initialized")
    return brain


def _new_frontend(request: Request, source: Optional[str]) -> BrainFrontend:
    settings = request.app.state.settings
    return BrainFrontend(
        _brain(request),
        source=source,
        memory=settings.HISTORY_SIZE,
        time_limit=settings.TIME_LIMIT_SECONDS,
        filter_input=settings.FILTER_INPUT,
        selection=settings.SELECTION_POLICY,
    )


def get_frontend(request: Request, source: Optional[str] = None) -> BrainFrontend:
    """
    One frontend (and so one History) per source scope.

    Only sources the store knows get a cached frontend; any other source is
    served by a throwaway one, which has nothing to generate from anyway.
    """
    state = request.app.state
    source = source or None
    with _frontends_lock:
        frontend = state.frontends.get(source)
        if frontend is not None:
            return frontend
        if source and not _brain(request).store.has_source(source):
            return _new_frontend(request, source)
        frontend = _new_frontend(request, source)
        state.frontends[source] = frontend
    return frontend


def _words(text: str) -> List[str]:
    words = text.split()
    if not words:
        raise HTTPException(status_code=400, detail="text is empty")
    return words


def _check_foul_play(request: Request, words: List[str]) -> None:
    settings = request.app.state.settings
    if foul_play(words, settings.MAX_CONSECUTIVE, settings.MAX_TOTAL):
        raise HTTPException(status_code=400, detail="too much repetition, refusing to learn")


@router.post("/learn")
def learn(req: LearnRequest, request: Request):
    words = _words(req.text)
    _check_foul_play(request, words)
    get_frontend(request).add(words, source=req.source)
    if req.source:
        # The scoped frontend exists once the source is registered.
        get_frontend(request, req.source).remember(" ".join(words))
    return {"ok": True, "data": {"learned": len(words) >= _brain(request).order}}


@router.post("/forget")
def forget(req: ForgetRequest, request: Request):
    words = _words(req.text)
    get_frontend(request).remove(words)
    return {"ok": True}


@router.post("/respond")
def respond(req: RespondRequest, request: Request):
    words = _words(req.text)
    frontend = get_frontend(request, req.source)
    reply = frontend.build_response(words)

    settings = request.app.state.settings
    if settings.LEARNING_ENABLED and not foul_play(words, settings.MAX_CONSECUTIVE, settings.MAX_TOTAL):
        frontend.brain.add_sentence(words, req.source)

    logger.info(f"[Markov] Replied with rarity {reply.rarity:.4f}")
    return {"ok": True, "data": _sentence_payload(reply)}


@router.get("/random")
def random_sentence(request: Request, source: Optional[str] = None):
    return {"ok": True, "data": _sentence_payload(get_frontend(request, source).build_random())}


@router.post("/word-count")
def word_count(req: WordCountRequest, request: Request):
    return {"ok": True, "data": {"counts": _brain(request).word_count(req.words)}}


@router.post("/seeds")
def seeds(req: SeedsRequest, request: Request):
    if req.count <= 0:
        raise HTTPException(status_code=400, detail="count must be positive")
    return {"ok": True, "data": {"seeds": get_frontend(request).get_seeds(req.text, req.count)}}
