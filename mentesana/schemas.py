"""
Pydantic schemas for the HTTP API.

Request fields keep the names the web client already sends. Required-ness
is checked by the domain operations so every missing value produces the
same ``{"error": ...}`` response.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel


class RegisterRequest(BaseModel):
    nombre: Optional[str] = None
    email: Optional[str] = None
    correo: Optional[str] = None
    password: Optional[str] = None
    contrasena: Optional[str] = None

    @property
    def email_value(self) -> Optional[str]:
        return self.email or self.correo

    @property
    def password_value(self) -> Optional[str]:
        return self.password or self.contrasena


class LoginRequest(BaseModel):
    email: Optional[str] = None
    correo: Optional[str] = None
    password: Optional[str] = None
    contrasena: Optional[str] = None

    @property
    def email_value(self) -> Optional[str]:
        return self.email or self.correo

    @property
    def password_value(self) -> Optional[str]:
        return self.password or self.contrasena


class AuthResponse(BaseModel):
    token: str
    user: dict


class CompleteExerciseRequest(BaseModel):
    idEjercicio: Optional[int] = None


class GratitudeRequest(BaseModel):
    gratitud1: Optional[str] = None
    gratitud2: Optional[str] = None
    gratitud3: Optional[str] = None


class ExerciseSessionResponse(BaseModel):
    success: bool
    message: str
    puntosGanados: int
    idSesion: int


class CreateChallengeRequest(BaseModel):
    Titulo: Optional[str] = None


class UpdateChallengeRequest(BaseModel):
    Cumplido: bool = False


class MessageResponse(BaseModel):
    message: str


class LogEmotionRequest(BaseModel):
    tipo: Optional[str] = None
    notas: Optional[str] = None


class SuccessResponse(BaseModel):
    success: bool
    message: str


class SelectPetRequest(BaseModel):
    Tipo: Optional[str] = None


class UpdatePetRequest(BaseModel):
    IdUsuarioMascota: Optional[int] = None
    Nivel: Optional[int] = None
    Experiencia: Optional[int] = None
    ExperienciaNecesaria: Optional[int] = None
    Felicidad: Optional[int] = None
    Energia: Optional[int] = None
    Hambre: Optional[int] = None
    Monedas: Optional[int] = None
    Estado: Optional[str] = None


class OkResponse(BaseModel):
    ok: Literal[True]


class StatsResponse(BaseModel):
    emocionesRegistradas: int
    ejerciciosRealizados: int
    retosCompletados: int
    diasConsecutivos: int


class SaveProfileRequest(BaseModel):
    idUsuario: Optional[int] = None
    nombreCompleto: Optional[str] = None
    correoElectronico: Optional[str] = None
    fechaDeNacimiento: Optional[str] = None
    genero: Optional[str] = None
    biografia: Optional[str] = None
    # Sent by the profile form but never applied.
    contrasenaActual: Optional[str] = None
    nuevaContrasena: Optional[str] = None
    confirmarNuevaContrasena: Optional[str] = None
