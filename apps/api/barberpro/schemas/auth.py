from pydantic import BaseModel, EmailStr, Field


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6, max_length=100)


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int | None = None
    user_id: str
    email: str
    role: str
    redirect_to: str


class LoginPage(BaseModel):
    title: str = "BarberPro"
    subtitle: str = "Entre na sua conta"
    form_fields: list[str] = Field(default_factory=lambda: ["email", "password"])
    action: str = "/auth/login"
