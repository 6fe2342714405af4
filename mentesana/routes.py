"""
HTTP routes for the wellbeing API.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from mentesana.config import Settings
from mentesana.db import Database
from mentesana.dependencies import get_app_settings, get_current_user, get_db
from mentesana.domain import (
    auth,
    challenges,
    emotions,
    exercises,
    health,
    pets,
    profile,
    stats,
)
from mentesana.schemas import (
    AuthResponse,
    CompleteExerciseRequest,
    CreateChallengeRequest,
    ExerciseSessionResponse,
    GratitudeRequest,
    LoginRequest,
    LogEmotionRequest,
    MessageResponse,
    OkResponse,
    RegisterRequest,
    SaveProfileRequest,
    SelectPetRequest,
    StatsResponse,
    SuccessResponse,
    UpdateChallengeRequest,
    UpdatePetRequest,
)
from mentesana.security import TokenIdentity

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/auth/register", response_model=AuthResponse)
def register(
    payload: RegisterRequest,
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    return auth.register(
        db, settings, payload.nombre, payload.email_value, payload.password_value
    )


@router.post("/auth/login", response_model=AuthResponse)
def login(
    payload: LoginRequest,
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    return auth.login(db, settings, payload.email_value, payload.password_value)


@router.get("/exercises")
def list_exercises(db: Database = Depends(get_db)):
    return exercises.list_exercises(db)


@router.post("/exercises/complete", response_model=ExerciseSessionResponse)
def complete_exercise(
    payload: CompleteExerciseRequest,
    db: Database = Depends(get_db),
    user: TokenIdentity = Depends(get_current_user),
):
    return exercises.complete_exercise(db, user.user_id, payload.idEjercicio)


@router.post("/exercises/gratitude", response_model=ExerciseSessionResponse)
def submit_gratitude(
    payload: GratitudeRequest,
    db: Database = Depends(get_db),
    user: TokenIdentity = Depends(get_current_user),
):
    return exercises.submit_gratitude(
        db, user.user_id, payload.gratitud1, payload.gratitud2, payload.gratitud3
    )


@router.get("/challenges")
def list_challenges(
    db: Database = Depends(get_db),
    user: TokenIdentity = Depends(get_current_user),
):
    return challenges.list_challenges(db, user.user_id)


@router.post("/challenges")
def create_challenge(
    payload: CreateChallengeRequest,
    db: Database = Depends(get_db),
    user: TokenIdentity = Depends(get_current_user),
):
    return challenges.create_challenge(db, user.user_id, payload.Titulo)


@router.put("/challenges/{challenge_id}")
def update_challenge(
    challenge_id: int,
    payload: UpdateChallengeRequest,
    db: Database = Depends(get_db),
    user: TokenIdentity = Depends(get_current_user),
):
    return challenges.set_challenge_status(
        db, user.user_id, challenge_id, payload.Cumplido
    )


@router.delete("/challenges/{challenge_id}", response_model=MessageResponse)
def delete_challenge(
    challenge_id: int,
    db: Database = Depends(get_db),
    user: TokenIdentity = Depends(get_current_user),
):
    return challenges.delete_challenge(db, user.user_id, challenge_id)


@router.get("/emotions")
def list_emotions(db: Database = Depends(get_db)):
    return emotions.list_emotions(db)


@router.post("/emotions/log", response_model=SuccessResponse)
def log_emotion(
    payload: LogEmotionRequest,
    db: Database = Depends(get_db),
    user: TokenIdentity = Depends(get_current_user),
):
    return emotions.log_emotion(db, user.user_id, payload.tipo, payload.notas)


@router.get("/emotions/history")
def emotion_history(
    db: Database = Depends(get_db),
    user: TokenIdentity = Depends(get_current_user),
):
    return emotions.emotion_history(db, user.user_id)


@router.get("/calendar/emotions")
def emotion_calendar(
    db: Database = Depends(get_db),
    user: TokenIdentity = Depends(get_current_user),
):
    return emotions.emotion_calendar(db, user.user_id)


@router.get("/pet/current")
def current_pet(
    db: Database = Depends(get_db),
    user: TokenIdentity = Depends(get_current_user),
):
    return pets.current_pet(db, user.user_id)


@router.post("/pet/select")
def select_pet(
    payload: SelectPetRequest,
    db: Database = Depends(get_db),
    user: TokenIdentity = Depends(get_current_user),
):
    return pets.select_pet(db, user.user_id, payload.Tipo)


@router.put("/pet/update", response_model=OkResponse)
def update_pet(
    payload: UpdatePetRequest,
    db: Database = Depends(get_db),
    user: TokenIdentity = Depends(get_current_user),
):
    return pets.update_pet(db, user.user_id, payload.model_dump())


@router.get("/stats/summary", response_model=StatsResponse)
def stats_summary(
    db: Database = Depends(get_db),
    user: TokenIdentity = Depends(get_current_user),
):
    return stats.summary(db, user.user_id)


@router.get("/profile")
def get_profile(
    db: Database = Depends(get_db),
    user: TokenIdentity = Depends(get_current_user),
):
    return profile.get_profile(db, user.user_id)


# No token required here, unlike every other write.
@router.post("/profile/save", response_model=SuccessResponse)
def save_profile(payload: SaveProfileRequest, db: Database = Depends(get_db)):
    return profile.save_profile(db, payload.idUsuario, payload.model_dump())


@router.get("/health")
def health_check(db: Database = Depends(get_db)):
    ok, body = health.check(db)
    if not ok:
        return JSONResponse(status_code=500, content=body)
    return body
