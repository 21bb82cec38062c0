# teamtasks/schemas/auth.py
from pydantic import BaseModel, Field, EmailStr
from teamtasks.schemas.user import UserRead

class RegisterRequest(BaseModel):
    """
    RegisterRequest — регистрация нового пользователя.
    """
    email: EmailStr = Field(..., examples=["jane@example.com"])
    password: str = Field(..., min_length=6, examples=["Secr3t!"])
    name: str = Field(..., min_length=2, max_length=128, examples=["Jane Doe"])

class LoginRequest(BaseModel):
    """
    LoginRequest — вход по email и паролю.
    """
    email: EmailStr
    password: str = Field(..., min_length=1)

class AuthResult(BaseModel):
    """
    AuthResult — пользователь и выданный ему access token.
    """
    user: UserRead
    token: str
