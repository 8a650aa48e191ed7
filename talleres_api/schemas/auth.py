# talleres_api/schemas/auth.py
from datetime import date
from typing import Annotated, Optional
from pydantic import BaseModel, BeforeValidator, EmailStr, Field, field_validator

from talleres_api.core.security_password import MIN_PASSWORD_LENGTH, MAX_PASSWORD_LENGTH


def _normalize_email(value: str) -> str:
    return (value or "").strip().lower()


Email = Annotated[EmailStr, BeforeValidator(_normalize_email)]


class LoginIn(BaseModel):
    email: Email
    password: str = Field(min_length=1)


class RegisterIn(BaseModel):
    email: Email
    password: str = Field(min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_LENGTH)


class ChangePasswordIn(BaseModel):
    currentPassword: str = Field(min_length=1)
    newPassword: str = Field(min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_LENGTH)


class CompleteProfileIn(BaseModel):
    nombre: str = Field(min_length=1, max_length=100)
    apellidos: str = Field(min_length=1, max_length=200)
    numero_control: str = Field(min_length=1, max_length=30)
    grupo: Optional[str] = Field(default=None, max_length=20)
    semestre: Optional[int] = Field(default=None, ge=1, le=12)
    telefono: Optional[str] = Field(default=None, max_length=30)
    fecha_nacimiento: Optional[date] = None

    @field_validator("nombre", "apellidos", "numero_control", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v

    def split_apellidos(self) -> tuple[str, Optional[str]]:
        partes = self.apellidos.split()
        return partes[0], (" ".join(partes[1:]) or None)


class UpdateProfileIn(BaseModel):
    nombre: str = Field(min_length=1, max_length=100)
    apellido_paterno: str = Field(min_length=1, max_length=100)
    apellido_materno: Optional[str] = Field(default=None, max_length=100)
    especialidad: Optional[str] = Field(default=None, max_length=150)
    telefono: Optional[str] = Field(default=None, max_length=30)
    descripcion: Optional[str] = None
    contacto_emergencia: Optional[str] = Field(default=None, max_length=150)
    telefono_emergencia: Optional[str] = Field(default=None, max_length=30)
    direccion: Optional[str] = Field(default=None, max_length=255)

    @field_validator("*", mode="before")
    @classmethod
    def _strip(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v
