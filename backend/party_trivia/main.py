from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .errors import GameError
from .game import controller
from .logging_config import configure_logging
from .schemas import (
    AnswerIn,
    CreateRoomOut,
    JoinIn,
    LifelineIn,
    PublicRoomOut,
)

logger = configure_logging(settings.LOG_LEVEL)

app = FastAPI(title="Party Trivia API")

origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()]
origin_regex = settings.CORS_ORIGIN_REGEX or None

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins or ["*"],
    allow_origin_regex=origin_regex,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(GameError)
async def game_error_handler(request: Request, exc: GameError):
    # errors go back to the requester only, never to the room's event log
    logger.debug("Rejected %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.code, "detail": str(exc)})


@app.get("/api/rooms/{room_id}/events")
async def list_events(room_id: str, after: int | None = None, limit: int = 200):
    room = controller.get_room(room_id)
    events = await controller.events.list(room.id, after=after, limit=limit)
    latest_seq = events[-1]["seq"] if events else after
    return {"events": events, "latest_seq": latest_seq}


@app.post("/api/rooms", response_model=CreateRoomOut)
async def create_room():
    room_id = await controller.create_room()
    return CreateRoomOut(room_id=room_id)


@app.get("/api/rooms/{room_id}", response_model=PublicRoomOut)
async def get_room(room_id: str):
    return PublicRoomOut(**controller.get_room(room_id).public_view())


@app.delete("/api/rooms/{room_id}")
async def close_room(room_id: str):
    await controller.close_room(room_id)
    return {"ok": True}


@app.post("/api/rooms/{room_id}/join")
async def join(room_id: str, payload: JoinIn):
    p = await controller.join_room(room_id, payload.participant_id, payload.nickname)
    return {"participant": p.model_dump()}


@app.post("/api/rooms/{room_id}/start")
async def start(room_id: str):
    rnd = await controller.start_game(room_id)
    return {"round": rnd.public_view()}


@app.post("/api/rooms/{room_id}/advance")
async def advance(room_id: str):
    rnd = await controller.advance_round(room_id)
    return {"round": rnd.public_view()}


@app.post("/api/rooms/{room_id}/answer")
async def answer(room_id: str, payload: AnswerIn):
    outcome = await controller.submit_answer(room_id, payload.participant_id, payload.option)
    return outcome.model_dump()


@app.post("/api/rooms/{room_id}/lifeline")
async def lifeline(room_id: str, payload: LifelineIn):
    effect = await controller.use_lifeline(room_id, payload.participant_id, payload.kind)
    return effect.model_dump(mode="json")


@app.get("/api/rooms/{room_id}/leaderboard")
async def leaderboard(room_id: str):
    return {"leaderboard": await controller.build_leaderboard(room_id)}
