from pydantic import BaseModel, Field


class ForgotPasswordIn(BaseModel):
    email: str = Field(..., min_length=1)


class ResetPasswordIn(BaseModel):
    token: str
    password: str
    confirm_password: str

    def passwords_match(self) -> bool:
        return self.password == self.confirm_password
